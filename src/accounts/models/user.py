from datetime import datetime

from sqlalchemy import DateTime, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from accounts.database.base import Base


class User(Base):
    """
    An account.

    E-mail and name are unique; the validator checks both before writes and
    the unique indexes catch whatever slips through concurrently.
    """
    __tablename__ = "users"

    # 0 is never assigned, so it can mean "no user" in exclusion lookups
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # lower-cased by UserRepository
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    gender: Mapped[int] = mapped_column(SmallInteger, default=0)
    # the ATOM string as submitted, e.g. 1990-05-17T00:00:00+00:00
    dob: Mapped[str] = mapped_column(String(32))
    # +4915112345678
    phone: Mapped[str | None] = mapped_column(String(17), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, name={self.name!r})>"
