"""
UserStore: persistence interface for Identities, plus two adapters.

``SqlAlchemyUserStore`` talks to PostgreSQL through async SQLAlchemy;
``InMemoryUserStore`` keeps everything in process (tests and local
development with ``USER_STORE=memory``).

Both enforce email/username uniqueness at write time and raise
``ConflictError`` when it is violated.  Connectivity problems surface as
``StoreUnavailableError`` so callers can tell them apart from bad input.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.errors import ConflictError, StoreUnavailableError
from auth.models import Identity
from database.models import User

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Abstract persistence contract used by ``AuthService``."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[Identity]:
        """Look up by normalised (lower-cased) email."""
        ...

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[Identity]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[Identity]:
        ...

    @abstractmethod
    async def create(self, identity: Identity) -> Identity:
        """
        Persist ``identity`` atomically.

        Raises ``ConflictError(field)`` if the email or username is taken,
        even when a concurrent request inserted it after the caller's
        uniqueness check.
        """
        ...


# ── In-memory adapter ──────────────────────────────────────────────────


class InMemoryUserStore(UserStore):
    def __init__(self):
        self._by_id: Dict[str, Identity] = {}
        self._id_by_email: Dict[str, str] = {}
        self._id_by_username: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def find_by_email(self, email: str) -> Optional[Identity]:
        user_id = self._id_by_email.get(email.lower())
        return self._by_id.get(user_id) if user_id else None

    async def find_by_username(self, username: str) -> Optional[Identity]:
        user_id = self._id_by_username.get(username)
        return self._by_id.get(user_id) if user_id else None

    async def find_by_id(self, user_id: str) -> Optional[Identity]:
        return self._by_id.get(user_id)

    async def create(self, identity: Identity) -> Identity:
        async with self._lock:
            email = identity.email.lower()
            if email in self._id_by_email:
                raise ConflictError("email")
            if identity.username in self._id_by_username:
                raise ConflictError("username")
            self._by_id[identity.id] = identity
            self._id_by_email[email] = identity.id
            self._id_by_username[identity.username] = identity.id
        return identity

    def __len__(self) -> int:
        return len(self._by_id)


# ── SQLAlchemy adapter ─────────────────────────────────────────────────


def _to_identity(row: User) -> Identity:
    return Identity(
        id=str(row.user_id),
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )


def _conflict_field(exc: IntegrityError) -> str:
    """Work out which unique constraint an ``IntegrityError`` came from."""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    if "uq_users_username" in text:
        return "username"
    if "uq_users_email" in text:
        return "email"
    return "username" if "(username)" in text else "email"


class SqlAlchemyUserStore(UserStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _find_one(self, clause) -> Optional[Identity]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(User).where(clause))
                row = result.scalar_one_or_none()
        except (DBAPIError, OSError) as exc:
            logger.error("User lookup failed: %s", exc)
            raise StoreUnavailableError() from exc
        return _to_identity(row) if row is not None else None

    async def find_by_email(self, email: str) -> Optional[Identity]:
        return await self._find_one(User.email == email.lower())

    async def find_by_username(self, username: str) -> Optional[Identity]:
        return await self._find_one(User.username == username)

    async def find_by_id(self, user_id: str) -> Optional[Identity]:
        try:
            uid = uuid.UUID(user_id)
        except (ValueError, TypeError):
            return None
        return await self._find_one(User.user_id == uid)

    async def create(self, identity: Identity) -> Identity:
        row = User(
            user_id=uuid.UUID(identity.id),
            email=identity.email.lower(),
            username=identity.username,
            password_hash=identity.password_hash,
            created_at=identity.created_at,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except IntegrityError as exc:
            field = _conflict_field(exc)
            logger.info("Insert rejected by unique constraint on %s", field)
            raise ConflictError(field) from exc
        except (DBAPIError, OSError) as exc:
            logger.error("User insert failed: %s", exc)
            raise StoreUnavailableError() from exc
        return identity
