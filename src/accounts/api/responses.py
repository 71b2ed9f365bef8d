"""
JSON response wrappers.

JsonResponse refuses status codes HTTP does not define, so a typo in a route
surfaces as UnknownResponseCodeError (500) instead of an odd status line.
"""

from http import HTTPStatus
from typing import Any, Mapping

from fastapi.responses import JSONResponse

from accounts.exceptions import UnknownResponseCodeError


class JsonResponse(JSONResponse):
    """
    JSON response with a validated status code.

    `data=None` produces an empty body rather than the literal `null`.
    """

    def __init__(self, data: Any = None, status_code: int = 200,
                 headers: Mapping[str, str] | None = None):
        try:
            HTTPStatus(status_code)
        except ValueError as e:
            raise UnknownResponseCodeError(f"Unknown response code: {status_code}") from e

        super().__init__(content=data, status_code=status_code, headers=headers)

    def render(self, content: Any) -> bytes:
        if content is None:
            return b""
        return super().render(content)


class EmptyJsonResponse(JsonResponse):
    """Body-less 200 response."""

    def __init__(self):
        super().__init__(None, 200, None)


__all__ = ["JsonResponse", "EmptyJsonResponse"]
