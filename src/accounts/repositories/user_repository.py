"""
User repository for handling user-specific database operations.

This module provides the UserRepository class: lookups by id and e-mail, the
uniqueness queries UserValidator relies on (has_email / has_name), and the
create / update operations used by the users API.
"""

from typing import Any
import logging

from sqlalchemy import select, exists
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from accounts.exceptions import RepositoryError, NotFoundError, DuplicateError
from accounts.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """
    Repository for User entity operations.

    Satisfies accounts.validators.UserLookup, so it can be handed straight to
    UserValidator.
    """

    # Columns update_user() is allowed to touch.
    UPDATABLE_FIELDS = frozenset({"email", "name", "password_hash", "gender", "dob", "phone"})

    def __init__(self, db: Session):
        self.db = db

    # =================================================================================================================
    # Create Operations
    # =================================================================================================================

    def create_user(
        self,
        email: str,
        name: str,
        password_hash: str,
        gender: int,
        dob: str,
        phone: str | None = None,
    ) -> User:
        """
        Create and persist a new user.

        Args:
            email: Unique email address (normalized to lowercase)
            name: Unique user name (stripped)
            password_hash: Already hashed password
            gender: 0, 1 or 2
            dob: Validated date of birth string
            phone: Optional international phone number

        Returns:
            The created User entity

        Raises:
            DuplicateError: If a user with the same name or email already exists
            RepositoryError: For any unexpected database errors
        """
        user = User(
            email=normalize_email(email),
            name=name.strip(),
            password_hash=password_hash,
            gender=gender,
            dob=dob,
            phone=phone,
        )
        logger.info("Creating new user: %s", user.name)
        return self._save(user)

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    def get_by_id(self, user_id: int) -> User | None:
        try:
            user = self.db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Error retrieving user %s: %s", user_id, e)
            raise RepositoryError("Failed to retrieve user") from e

        if user is None:
            logger.debug("No user found with id: %s", user_id)
        return user

    def get_by_id_or_raise(self, user_id: int) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def get_by_email(self, email: str) -> User | None:
        """
        Get a user by their email address (case-insensitive).
        """
        try:
            query = select(User).where(User.email == normalize_email(email))
            return self.db.execute(query).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Error retrieving user by email: %s", e)
            raise RepositoryError("Failed to retrieve user by email") from e

    # =================================================================================================================
    # Existence Checks
    # =================================================================================================================

    def has_email(self, email: str, exclude_user_id: int = 0) -> bool:
        """
        Check whether another user already holds `email`.

        Args:
            email: Email address to check (compared normalized)
            exclude_user_id: id of the user being edited; 0 excludes nobody

        Returns:
            True if a different user has this email, False otherwise
        """
        return self._exists(User.email == normalize_email(email), exclude_user_id)

    def has_name(self, name: str, exclude_user_id: int = 0) -> bool:
        """
        Check whether another user already holds `name` (exact match).
        """
        return self._exists(User.name == name.strip(), exclude_user_id)

    def _exists(self, condition, exclude_user_id: int) -> bool:
        # SELECT EXISTS(...) so no User row is loaded just to answer yes/no
        criteria = [condition]
        if exclude_user_id:
            criteria.append(User.id != exclude_user_id)

        try:
            found = self.db.execute(select(exists().where(*criteria))).scalar()
        except SQLAlchemyError as e:
            logger.error("Error running user existence check: %s", e)
            raise RepositoryError("Failed to check user existence") from e

        return bool(found)

    # =================================================================================================================
    # Update Operations
    # =================================================================================================================

    def update_user(self, user_id: int, **fields: Any) -> User:
        """
        Update the given columns of a user.

        Email and name are normalized the same way create_user() does it.

        Raises:
            RepositoryError: for unknown field names or database failures
            NotFoundError: if the user does not exist
            DuplicateError: if the new email or name is taken
        """
        unknown = sorted(set(fields) - self.UPDATABLE_FIELDS)
        if unknown:
            raise RepositoryError(f"Unknown field(s) for User: {', '.join(unknown)}", fields=unknown)

        user = self.get_by_id_or_raise(user_id)

        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
        if "name" in fields:
            fields["name"] = fields["name"].strip()

        for key, value in fields.items():
            setattr(user, key, value)

        logger.info("Updating user %s: %s", user_id, sorted(fields))
        return self._save(user)

    # =================================================================================================================
    # Internals
    # =================================================================================================================

    def _save(self, user: User) -> User:
        # read before commit: a rollback expires persistent instances
        email, name, user_id = user.email, user.name, user.id or 0
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError as e:
            self.db.rollback()
            conflicts = self._find_conflicts(email, name, user_id)
            logger.info("Unique constraint violation for user: fields=%s", conflicts)
            raise DuplicateError(
                f"User already exists for field(s): {', '.join(conflicts) or 'unknown'}",
                fields=conflicts,
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error saving user: %s", e)
            raise RepositoryError("Failed to save user") from e

    def _find_conflicts(self, email: str, name: str, user_id: int) -> list[str]:
        """Best-effort: which unique columns are held by a user other than `user_id`."""
        conflicts = []
        if email and self.has_email(email, user_id):
            conflicts.append("email")
        if name and self.has_name(name, user_id):
            conflicts.append("name")
        return conflicts
