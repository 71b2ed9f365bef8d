"""
Repository layer.

    from accounts.repositories import UserRepository
"""

from .user_repository import UserRepository

__all__ = [
    "UserRepository",
]
