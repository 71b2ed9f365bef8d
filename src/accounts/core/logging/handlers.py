# src/accounts/core/logging/handlers.py
"""
Handler entries for the dictConfig built in builder.py.

Errors always get a JSON copy of their own (file or stderr) next to the
regular output.
"""

from pathlib import Path

from accounts.config.settings import Settings

_FILTERS = ("request_id", "redact")


def _handler(cls: str, formatter: str, level: str, **options) -> dict:
    return {"class": cls, "formatter": formatter, "level": level, "filters": list(_FILTERS), **options}


def _rotating(settings: Settings, filename: str) -> dict:
    return {
        "filename": str(Path(settings.LOG_DIR) / filename),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
    }


def _formatter_name(settings: Settings) -> str:
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def get_console_handler(settings: Settings) -> dict:
    return _handler("logging.StreamHandler", _formatter_name(settings), settings.LOG_LEVEL)


def get_error_console_handler(settings: Settings) -> dict:
    return _handler("logging.StreamHandler", "json", "ERROR")


def get_file_handler(settings: Settings) -> dict:
    return _handler(
        "logging.handlers.RotatingFileHandler",
        _formatter_name(settings),
        settings.LOG_LEVEL,
        **_rotating(settings, "app.log"),
    )


def get_error_file_handler(settings: Settings) -> dict:
    return _handler(
        "logging.handlers.RotatingFileHandler", "json", "ERROR", **_rotating(settings, "errors.log")
    )
