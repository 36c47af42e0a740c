"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import asyncio

import bcrypt

from auth.errors import InvalidInputError

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class CredentialHasher:
    """bcrypt hasher with a fixed work factor (default 12)."""

    def __init__(self, rounds: int = 12):
        if not 4 <= rounds <= 31:
            raise ValueError(f"bcrypt rounds must be between 4 and 31, got {rounds}")
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt (auto-salted)."""
        if not password:
            raise InvalidInputError("Password must not be empty")
        raw = password.encode()
        if len(raw) > MAX_PASSWORD_BYTES:
            raise InvalidInputError(
                f"Password must not exceed {MAX_PASSWORD_BYTES} bytes"
            )
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except (ValueError, TypeError):
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)
