# src/accounts/core/logging/middleware.py
"""
Request ID middleware for FastAPI / Starlette.

Uses the incoming `X-Request-ID` header when it is a reasonable token,
otherwise generates a UUID4. The id is stored with set_request_id() for the
duration of the request (RequestIdFilter reads it) and echoed back in the
`X-Request-ID` response header.
"""

import re
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Upstream ids are written into log lines verbatim; keep them short and printable.
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._\-]{1,128}")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER)
        if incoming and _VALID_REQUEST_ID.fullmatch(incoming):
            rid = incoming
        else:
            rid = str(uuid.uuid4())

        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
