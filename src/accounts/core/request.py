"""
Read-only access to the fields of an incoming request.

Validators never look at Starlette objects directly. They receive something
that satisfies RequestInterface: field presence, field value as text, and the
set of present field names. PayloadRequest is the implementation used by the
HTTP layer and by tests.
"""

from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Mapping, Protocol, runtime_checkable

from starlette.requests import Request

from accounts.exceptions import ValidationError

logger = logging.getLogger(__name__)


@runtime_checkable
class RequestInterface(Protocol):
    def has(self, field: str) -> bool: ...

    def get(self, field: str) -> str: ...

    def keys(self) -> set[str]: ...


def _as_text(value: Any) -> str:
    # Mirrors what the same field would look like in a form post.
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


class PayloadRequest:
    """
    Immutable request view over a mapping of field name -> value.

    The mapping is copied on construction, so later changes to the source dict
    are not seen by a validation call already in progress.
    """

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data = MappingProxyType(dict(data or {}))

    def has(self, field: str) -> bool:
        return field in self._data

    def get(self, field: str) -> str:
        """
        Return the text form of a present field.

        Raises:
            KeyError: if the field is not present; call has() first.
        """
        return _as_text(self._data[field])

    def keys(self) -> set[str]:
        return set(self._data.keys())

    def only(self, *fields: str) -> dict[str, str]:
        """Return the present fields among `fields` as a plain dict of text values."""
        return {f: self.get(f) for f in fields if self.has(f)}

    def __repr__(self) -> str:
        # Field names only; values may hold passwords.
        return f"<PayloadRequest(fields={sorted(self._data)!r})>"

    @classmethod
    async def from_starlette(cls, request: Request) -> "PayloadRequest":
        """
        Build a PayloadRequest from a Starlette/FastAPI request body.

        - form bodies (urlencoded / multipart) are read with request.form()
        - everything else must be a JSON object; an empty body is an empty request

        Raises:
            ValidationError: when the body is not a JSON object.
        """
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
            form = await request.form()
            return cls({k: v for k, v in form.items()})

        raw = await request.body()
        if not raw.strip():
            return cls()

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.info("Rejected request body that is not valid JSON")
            raise ValidationError("Request body must be a JSON object!") from e

        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object!")
        return cls(data)


__all__ = ["RequestInterface", "PayloadRequest"]
