# accounts/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   └── base.py          # ResponsableError hierarchy (status code + JSON payload per error)

from .base import (
    ResponsableError,
    ValidationError,
    Unauthenticated,
    UnknownResponseCodeError,
    RepositoryError,
    NotFoundError,
    DuplicateError,
)

__all__ = [
    "ResponsableError",
    "ValidationError",
    "Unauthenticated",
    "UnknownResponseCodeError",
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
]
