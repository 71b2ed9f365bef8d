"""
Validation of user-supplied account fields.

UserValidator checks e-mail, name, password, gender, date of birth and phone
against simple format rules and asks a repository whether an e-mail or name is
already taken. Checks run in a fixed order and the first violation raises a
ValidationError; there is no aggregation of problems, apart from the list of
missing required fields on account creation.

The validator is synchronous and keeps no state besides the repository it was
built with, so one instance can serve concurrent requests as long as the
repository can.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta
from typing import Any, Protocol

from email_validator import EmailNotValidError, validate_email

from accounts.core.request import RequestInterface
from accounts.exceptions import ValidationError

logger = logging.getLogger(__name__)

# RFC 3339 date-time, e.g. 2020-01-01T00:00:00+00:00
ATOM = "%Y-%m-%dT%H:%M:%S%z"

AVAILABLE_GENDERS = (0, 1, 2)

USER_INPUT_REQUIRED_FIELDS = ("email", "name", "password", "dob", "gender")

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 255

_NAME_RE = re.compile(r"[-.a-zа-яё0-9]+", re.IGNORECASE)
_PHONE_RE = re.compile(r"\+[0-9]{7,16}")
_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")


class UserLookup(Protocol):
    """
    What the validator needs from persistence.

    `exclude_user_id` is the id of the user being edited; 0 excludes nobody.
    """

    def has_email(self, email: str, exclude_user_id: int = 0) -> bool: ...

    def has_name(self, name: str, exclude_user_id: int = 0) -> bool: ...


def coerce_gender(value: Any) -> int:
    """
    Coerce a raw gender value to int. Never raises.

    Strings contribute their leading integer ("2" -> 2, " 1x" -> 1); a value
    with no leading integer becomes 0, which is itself an accepted gender.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        m = _LEADING_INT_RE.match(value)
        return int(m.group(1)) if m else 0
    return 0


def _format_offset(offset: timedelta) -> str:
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _format_date(value: datetime, fmt: str) -> str:
    # strftime renders %z as +HHMM (ATOM wants +HH:MM) and leaves years below 1000 unpadded
    fmt = fmt.replace("%Y", f"{value.year:04d}")
    offset = value.utcoffset()
    if "%z" in fmt and offset is not None:
        fmt = fmt.replace("%z", _format_offset(offset))
    return value.strftime(fmt)


class UserValidator:
    """
    Validator for user account input.

    Args:
        repository: anything implementing UserLookup (UserRepository in the
            app, an in-memory fake in tests).
    """

    def __init__(self, repository: UserLookup):
        self._repository = repository

    @property
    def repository(self) -> UserLookup:
        return self._repository

    # =================================================================================================================
    # Request-level validation
    # =================================================================================================================

    def validate_auth_request(self, request: RequestInterface) -> None:
        if not request.has("email"):
            raise ValidationError("Missing email!", fields=["email"])

        if not request.has("password"):
            raise ValidationError("Missing password!", fields=["password"])

    def validate_user_input(self, request: RequestInterface) -> None:
        """
        Full validation for account creation.

        Order: required fields, email, name, password, gender, dob, phone (only
        when present). The first failing check raises.
        """
        self._validate_user_input_contains_required_fields(request)

        self.is_valid_email(request.get("email"))
        self.is_valid_name(request.get("name"))
        self.is_valid_password(request.get("password"))
        self.is_valid_gender(coerce_gender(request.get("gender")))
        self.is_valid_date_of_birth(request.get("dob"))

        if request.has("phone"):
            self.is_valid_phone(request.get("phone"))

    def validate_optional_user_input(self, request: RequestInterface, current_user_id: int = 0) -> None:
        """
        Partial validation for account updates.

        Same checks and order as validate_user_input, but each one runs only
        when its field is present. `current_user_id` is excluded from the
        e-mail and name uniqueness lookups so users can keep their own values.
        """
        if request.has("email"):
            self.is_valid_email(request.get("email"), current_user_id)

        if request.has("name"):
            self.is_valid_name(request.get("name"), current_user_id)

        if request.has("password"):
            self.is_valid_password(request.get("password"))

        if request.has("gender"):
            self.is_valid_gender(coerce_gender(request.get("gender")))

        if request.has("dob"):
            self.is_valid_date_of_birth(request.get("dob"))

        if request.has("phone"):
            self.is_valid_phone(request.get("phone"))

    def _validate_user_input_contains_required_fields(self, request: RequestInterface) -> None:
        present = request.keys()
        missing = [f for f in USER_INPUT_REQUIRED_FIELDS if f not in present]

        if missing:
            logger.info("User input rejected: missing fields %s", missing)
            raise ValidationError(f"Missing fields: [{', '.join(missing)}]", fields=missing)

    # =================================================================================================================
    # Field-level checks
    # =================================================================================================================

    def is_valid_email(self, email: str, current_user_id: int = 0) -> bool:
        try:
            validate_email(email, check_deliverability=False, allow_smtputf8=False, allow_quoted_local=True)
        except EmailNotValidError as e:
            logger.info("User input rejected: email format (%s)", e)
            raise ValidationError("Seem`s user email is not an email!", fields=["email"]) from e

        if self._repository.has_email(email, current_user_id):
            logger.info("User input rejected: email already taken")
            raise ValidationError("User with this email already exists!", fields=["email"])

        return True

    def is_valid_name(self, name: str, current_user_id: int = 0) -> bool:
        if _NAME_RE.fullmatch(name) is None:
            logger.info("User input rejected: name format")
            raise ValidationError(
                "User name must contain only latin or russian characters, digits and . and -",
                fields=["name"],
            )

        if self._repository.has_name(name, current_user_id):
            logger.info("User input rejected: name already taken")
            raise ValidationError("User with this name already exists!", fields=["name"])

        return True

    def is_valid_password(self, password: str) -> bool:
        # len() counts code points, so a multi-byte character is one char.
        length = len(password)

        if length < PASSWORD_MIN_LENGTH or length > PASSWORD_MAX_LENGTH:
            logger.info("User input rejected: password length %d", length)
            raise ValidationError(
                f"User password must have length greater or equal to {PASSWORD_MIN_LENGTH} chars "
                f"and less or equal to {PASSWORD_MAX_LENGTH} chars!",
                fields=["password"],
            )

        return True

    def is_valid_phone(self, phone: str) -> bool:
        if _PHONE_RE.fullmatch(phone) is None:
            logger.info("User input rejected: phone format")
            raise ValidationError(
                "Seem`s that phone not in international phone number format!",
                fields=["phone"],
            )

        return True

    def is_valid_gender(self, gender: int) -> bool:
        # bool is an int subclass; True must not pass as gender 1
        if isinstance(gender, bool) or gender not in AVAILABLE_GENDERS:
            logger.info("User input rejected: gender %r", gender)
            raise ValidationError(
                f"User gender must be one of [{', '.join(str(g) for g in AVAILABLE_GENDERS)}]",
                fields=["gender"],
            )

        return True

    def is_valid_date_of_birth(self, date_of_birth: str) -> bool:
        if not self.is_valid_date(date_of_birth):
            logger.info("User input rejected: date of birth format")
            raise ValidationError("Seem`s that date of birth has wrong format!", fields=["dob"])

        return True

    def is_valid_date(self, date_string: str, fmt: str = ATOM) -> bool:
        """
        Strictly parse `date_string` with `fmt`.

        Returns True only when parsing succeeds and formatting the parsed value
        with the same `fmt` gives back exactly `date_string`. That rejects
        impossible dates (2020-02-30) as well as lenient parses such as
        single-digit months.
        """
        try:
            parsed = datetime.strptime(date_string, fmt)
        except (TypeError, ValueError):
            return False

        return _format_date(parsed, fmt) == date_string


__all__ = [
    "ATOM",
    "AVAILABLE_GENDERS",
    "USER_INPUT_REQUIRED_FIELDS",
    "UserLookup",
    "UserValidator",
    "coerce_gender",
]
