# src/accounts/core/logging/formatters.py

"""
Custom logging formatters.

  - JsonFormatter: one JSON object per line for log collectors. Includes
    service, env, version and request_id next to the usual record fields,
    plus anything passed through `extra={...}`.

  - ColorFormatter: ANSI-coloured single lines for local development.

builder.make_dict_config() picks between them from Settings.LOG_FORMAT.
"""

import json
import logging
from importlib import metadata as importlib_metadata
from typing import Any
from logging import LogRecord

DISTRIBUTION_NAME = "accounts-api"


def get_project_version(default: str = "unknown") -> str:
    """Installed version of the distribution, or `default` when running from a checkout."""
    try:
        return importlib_metadata.version(DISTRIBUTION_NAME)
    except importlib_metadata.PackageNotFoundError:
        return default


PROJECT_VERSION = get_project_version()

# LogRecord attributes that are not "extras"
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Construction:
      - env: environment name (e.g., "development" | "production"); optional.
      - service: logical service name to include in logs.
      - datefmt: optional date format passed to logging.Formatter.

    Non-serializable extras are converted with str(); format() never raises
    because of an odd `extra` value.
    """

    def __init__(self, *, env: str | None = None, service: str = DISTRIBUTION_NAME, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for k, v in record.__dict__.items():
            if k in log_record or k in _RESERVED_ATTRS or k.startswith("_"):
                continue
            try:
                json.dumps(v)
                log_record[k] = v
            except (TypeError, ValueError):
                log_record[k] = str(v)

        # ensure_ascii=False keeps Cyrillic user names readable
        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Development-friendly colored formatter.

    Only the level name is coloured; the rest of the line follows the
    configured format string.
    """

    COLOR_CODES = {
        "DEBUG": "\033[36m",        # cyan
        "INFO": "\033[32m",         # green
        "WARNING": "\033[33m",      # yellow
        "ERROR": "\033[31m",        # red
        "CRITICAL": "\033[1;41m",   # bold on red background
    }
    RESET = "\033[0m"

    def format(self, record: LogRecord) -> str:
        original = record.levelname
        color = self.COLOR_CODES.get(original)
        if color:
            record.levelname = f"{color}{original:<8}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # the same record may reach a non-coloured handler next
            record.levelname = original
