"""
Application factory.

    uvicorn --factory accounts.main:create_app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from accounts.api.v1 import register_exception_handlers, users_router
from accounts.config import Settings, get_settings
from accounts.core.logging import RequestIDMiddleware, setup_logging
from accounts.core.logging.formatters import PROJECT_VERSION
from accounts.core.security import PasswordHasher
from accounts.database import Base, build_engine, build_session_factory
from accounts import models  # noqa: F401 - registers User with Base.metadata

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting accounts API", extra={"env": settings.ENV})
        if settings.CREATE_TABLES:
            Base.metadata.create_all(bind=engine)
        yield
        logger.info("Shutting down accounts API")
        engine.dispose()

    app = FastAPI(title="Accounts API", version=PROJECT_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.password_hasher = PasswordHasher(settings.PASSWORD_HASH_SCHEME)

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(users_router)

    return app
