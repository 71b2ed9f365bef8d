"""
Password hashing.

Thin wrapper around Passlib's CryptContext; the scheme comes from
Settings.PASSWORD_HASH_SCHEME so it can be changed without touching callers.
"""

from __future__ import annotations

from passlib.context import CryptContext


class PasswordHasher:
    def __init__(self, scheme: str = "pbkdf2_sha256") -> None:
        self._context = CryptContext(schemes=[scheme], deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        # Malformed stored hashes count as a failed match, not a server error.
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            return False
