"""
Core pytest configuration for the entire test suite.

This module provides only what ALL kinds of tests need: logging setup and a
throw-away database per test.

Domain-specific fixtures live in:
- tests/test_fixtures/validator_fixtures.py   (in-memory user lookup, requests)
- tests/test_fixtures/repository_fixtures.py  (UserRepository + sample users)
- tests/test_fixtures/api_fixtures.py         (FastAPI app + TestClient)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Generator

# Silence noisy third-party loggers before anything imports them.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "httpx",
    "passlib",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# Ensure 'src' on sys.path so `import accounts...` works without an install
SRC = Path(__file__).resolve().parents[2]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from accounts.config import Settings
from accounts.core.logging.builder import setup_logging
from accounts.database.base import Base
from accounts import models  # noqa: F401 – import to register models with Base.metadata


def make_test_settings(**overrides) -> Settings:
    """Settings that ignore the developer's environment/.env."""
    values = {
        "ENV": "testing",
        "DATABASE_URL": "sqlite://",
        "CREATE_TABLES": False,
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "text",
        "LOG_TO_STDOUT": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install application logging once for the whole session so formatters and
    filters behave as they do in the app.
    """
    setup_logging(make_test_settings())
    yield


@pytest.fixture
def test_settings() -> Settings:
    return make_test_settings()


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------

@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """
    A private in-memory SQLite database per test.

    StaticPool keeps the single connection alive (an in-memory database
    disappears with its connection) and check_same_thread=False lets the
    TestClient's worker threads use it.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    maker = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = maker()
    try:
        yield session
    finally:
        session.close()


from .test_fixtures.validator_fixtures import (  # noqa: E402,F401
    user_lookup,
    user_validator,
    valid_user_payload,
)
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    user_repository,
    sample_user_data,
    create_user,
)
from .test_fixtures.api_fixtures import (  # noqa: E402,F401
    app,
    client,
)
