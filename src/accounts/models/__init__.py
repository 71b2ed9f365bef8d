"""
Centralized access to the database models.

    from accounts.models import User
"""

from .user import User

__all__ = [
    "User",
]
