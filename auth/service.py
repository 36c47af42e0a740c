"""
AuthService — register, login and token authentication.

Orchestrates validation, the ``UserStore``, the ``CredentialHasher`` and
the ``TokenIssuer``.  Holds no per-request state; every failure is one
of the ``auth.errors`` types.
"""

from __future__ import annotations

import logging

from auth.errors import (
    ConflictError,
    InvalidCredentialsError,
    TokenInvalidError,
    ValidationFailedError,
)
from auth.jwt import TokenIssuer
from auth.models import AuthResult, Identity, PublicUser
from auth.password import CredentialHasher
from auth.validation import normalize_email, validate_login, validate_registration
from database.store import UserStore

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, store: UserStore, hasher: CredentialHasher, tokens: TokenIssuer):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens

    def _result_for(self, identity: Identity) -> AuthResult:
        token = self.tokens.issue(identity.id, email=identity.email)
        return AuthResult(token=token, user=identity.public())

    async def register(self, email: str, password: str, username: str) -> AuthResult:
        """
        Create a new Identity and issue its first token.

        The uniqueness pre-check gives a friendly error in the common
        case; two concurrent registrations can still both pass it, in
        which case the store's write-time constraint raises
        ``ConflictError`` for the loser.
        """
        errors = validate_registration(email, password, username)
        if errors:
            raise ValidationFailedError(errors)

        email = normalize_email(email)
        if await self.store.find_by_email(email) is not None:
            raise ConflictError("email")
        if await self.store.find_by_username(username) is not None:
            raise ConflictError("username")

        password_hash = await self.hasher.hash_async(password)
        identity = await self.store.create(
            Identity(email=email, username=username, password_hash=password_hash)
        )

        logger.info("Registered user %s (%s)", identity.username, identity.id)
        return self._result_for(identity)

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and issue a token.

        Unknown email and wrong password raise the same
        ``InvalidCredentialsError`` so accounts cannot be enumerated.
        """
        errors = validate_login(email, password)
        if errors:
            raise ValidationFailedError(errors)

        identity = await self.store.find_by_email(normalize_email(email))
        if identity is None:
            logger.info("Login rejected: unknown account")
            raise InvalidCredentialsError()

        if not await self.hasher.verify_async(password, identity.password_hash):
            logger.info("Login rejected: bad password for %s", identity.id)
            raise InvalidCredentialsError()

        logger.info("Login: %s (%s)", identity.username, identity.id)
        return self._result_for(identity)

    def authenticate(self, token: str) -> str:
        """Return the subject id carried by a valid token."""
        return self.tokens.verify(token)

    async def current_user(self, token: str) -> PublicUser:
        user_id = self.authenticate(token)
        identity = await self.store.find_by_id(user_id)
        if identity is None:
            # Signed for an account that no longer exists.
            raise TokenInvalidError("Token subject does not exist")
        return identity.public()

    async def refresh(self, token: str) -> AuthResult:
        """Issue a fresh token for the holder of a still-valid one."""
        user_id = self.authenticate(token)
        identity = await self.store.find_by_id(user_id)
        if identity is None:
            raise TokenInvalidError("Token subject does not exist")
        return self._result_for(identity)
