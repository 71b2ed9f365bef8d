"""
Application exceptions that know how they are rendered over HTTP.

Every error raised on purpose by this package derives from ResponsableError.
The exception itself carries the canonical error code, the HTTP status that
code maps to, and the JSON payload a client receives, so the FastAPI handlers
in api/v1/error_handlers.py stay tiny.
"""

from typing import Iterable


class ResponsableError(Exception):
    """
    An error a client is allowed to see.

    `message` goes out as "detail", `fields` names the offending request
    fields and `error_code` selects both the "code" key and the status.
    """

    ERROR_CODE_TO_STATUS = {
        "validation_error": 400,
        "unauthenticated": 401,
        "not_found": 404,
        "duplicate": 409,
        "unknown_response_code": 500,
        "repository_error": 500,
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.error_code = error_code

    def __str__(self) -> str:
        extra = []
        if self.fields:
            extra.append("fields: " + ", ".join(self.fields))
        if self.error_code:
            extra.append("code: " + self.error_code)
        return f"{self.message} ({'; '.join(extra)})" if extra else self.message

    def to_payload(self) -> dict:
        """{"detail": ..., "code": ..., "fields": [...]}; empty keys are left out."""
        payload = {"detail": self.message, "code": self.error_code, "fields": self.fields}
        return {key: value for key, value in payload.items() if value}

    def http_status(self) -> int:
        # codes not in the table are client errors
        return self.ERROR_CODE_TO_STATUS.get(self.error_code or "", 400)


class ValidationError(ResponsableError):
    """Client-supplied data violates a business rule. Always 400."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="validation_error")


class Unauthenticated(ResponsableError):
    def __init__(self, message: str = "Missing access_token!"):
        super().__init__(message, error_code="unauthenticated")


class UnknownResponseCodeError(ResponsableError):
    """Raised when a response is built with a status code HTTP does not define."""

    def __init__(self, message: str):
        super().__init__(message, error_code="unknown_response_code")


class RepositoryError(ResponsableError):
    """Persistence failed. NotFoundError and DuplicateError narrow it down."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 error_code: str = "repository_error"):
        super().__init__(message, fields=fields, error_code=error_code)


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, error_code="not_found")


class DuplicateError(RepositoryError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        # the unique index won a race the validator's pre-check lost -> 409
        super().__init__(message, fields=fields, error_code="duplicate")


__all__ = [
    "ResponsableError",
    "ValidationError",
    "Unauthenticated",
    "UnknownResponseCodeError",
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
]
