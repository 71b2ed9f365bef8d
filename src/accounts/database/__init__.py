from .base import Base
from .session import build_engine, build_session_factory, get_session

__all__ = ["Base", "build_engine", "build_session_factory", "get_session"]
