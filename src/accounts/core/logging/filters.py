# src/accounts/core/logging/filters.py
"""
Logging filters

- RequestIdFilter: attaches the current request id (kept in a ContextVar by
  RequestIDMiddleware) to every LogRecord, so formatters can reference
  `%(request_id)s` without a KeyError. Records logged outside a request get
  the sentinel "-".
- RedactFilter: masks record attributes whose names look like secrets.
  Account payloads carry passwords; anything passed through `extra={...}`
  under a sensitive key is replaced before a handler formats it.

A ContextVar (not threading.local) holds the id because sync route handlers
run in a threadpool while the middleware runs on the event loop; Starlette
copies the context into the worker thread, a thread-local would not follow.
"""

import logging
from logging import LogRecord
import contextvars

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id in the current context.

    Returns:
        token: contextvars.Token which can be passed to reset_request_id(token)
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token):
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantees every LogRecord has a `request_id` attribute.

    Precedence: explicit `extra={"request_id": ...}` > context var > "-".
    Always returns True; the filter annotates, it never drops.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {
        "password",
        "password_hash",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
    }
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
