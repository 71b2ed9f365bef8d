# accounts/api/v1/error_handlers.py
"""
FastAPI exception handlers that map application exceptions to HTTP responses.

How to use:
    - register_exception_handlers(app) from the app factory (main.create_app).
    - Application code raises accounts.exceptions.* (ValidationError, Unauthenticated, ...).
    - The handler produces the JSON payload via .to_payload() and the status via .http_status().
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from accounts.exceptions import ResponsableError

logger = logging.getLogger(__name__)


async def responsable_error_handler(request: Request, exc: ResponsableError) -> JSONResponse:
    """
    Render any ResponsableError.
    Payload: exc.to_payload() -> {"detail": "...", "code": "...", "fields": [...]}
    """
    status = exc.http_status()
    if status >= 500:
        logger.error("%s for %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    else:
        # client errors are expected traffic; do not log submitted values
        logger.info("%s for %s %s: fields=%s", type(exc).__name__, request.method, request.url.path, exc.fields)
    return JSONResponse(status_code=status, content=exc.to_payload())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort for exceptions nothing else handled -> 500 without internals.
    """
    logger.error("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Subclasses (ValidationError, NotFoundError, ...) resolve to the base handler via the MRO.
    app.add_exception_handler(ResponsableError, responsable_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
