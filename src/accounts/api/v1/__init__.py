from .error_handlers import register_exception_handlers
from .users import router as users_router

__all__ = ["register_exception_handlers", "users_router"]
