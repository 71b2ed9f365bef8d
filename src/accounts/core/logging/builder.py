# src/accounts/core/logging/builder.py
"""
Turns Settings into a logging.dictConfig mapping and applies it.

make_dict_config() has no side effects and is what the tests inspect;
setup_logging() is called once by create_app().
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from accounts.config.settings import Settings

from .filters import RedactFilter, RequestIdFilter
from .formatters import DISTRIBUTION_NAME, ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)

LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def _logger(level: str, handlers: list[str], propagate: bool = False) -> dict:
    return {"level": level, "handlers": handlers, "propagate": propagate}


def make_dict_config(settings: Settings) -> dict:
    """
    Handlers are "console" plus either "file"/"error_file" (LOG_TO_STDOUT off
    and LOG_DIR set) or "error_console". Every handler runs the request_id and
    redact filters.
    """
    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)
    everywhere = list(handlers)

    # "standard" is the line format; colour only makes sense for humans
    line_formatter = ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"()": line_formatter, "format": LINE_FORMAT},
            "json": {"()": JsonFormatter, "env": settings.ENV, "service": DISTRIBUTION_NAME},
        },
        "filters": {
            "request_id": {"()": RequestIdFilter},
            "redact": {"()": RedactFilter},
        },
        "handlers": handlers,
        "loggers": {
            "": _logger(settings.LOG_LEVEL, everywhere, propagate=True),
            "uvicorn.error": _logger(settings.LOG_LEVEL, everywhere),
            "uvicorn.access": _logger("INFO", ["console"]),
            # statements and parameters carry e-mails and names
            "sqlalchemy.engine": _logger(
                "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING", ["console"]
            ),
            "passlib": _logger("WARNING", everywhere),
        },
    }


def setup_logging(settings: Settings) -> None:
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # handlers attached later (pytest's caplog, for one) still get %(request_id)s
    logging.getLogger().addFilter(RequestIdFilter())
