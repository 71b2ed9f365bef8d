from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from accounts.config import Settings


def build_engine(settings: Settings) -> Engine:
    """
    Create the Engine for `settings.DATABASE_URL`.

    SQLite needs check_same_thread=False because FastAPI runs sync route
    handlers (and therefore sessions) in a threadpool.
    """
    connect_args = {"check_same_thread": False} if settings.is_sqlite else {}
    return create_engine(
        settings.DATABASE_URL,
        echo=settings.SQLALCHEMY_ECHO,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_session(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency. Opens a session on the app's engine and closes it after the request.

    create_app() stores the factory on app.state.session_factory.

    Usage:
        def endpoint(db: Session = Depends(get_session)):
            db.execute(...)
    """
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
