"""
JWT-style session token creation and verification.

Tokens are ``<payload>.<signature>``: the payload is URL-safe base64
(unpadded) JSON carrying ``sub``, ``email``, ``iat`` and ``exp``; the
signature is the hex HMAC-SHA256 of the payload segment.  The secret is
passed in at construction (see ``config.jwt_secret``, env var
``JWT_SECRET``).
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Callable, Optional

from auth.errors import TokenExpiredError, TokenInvalidError, TokenMalformedError

DEFAULT_TTL_SECONDS = 86400


@dataclass(frozen=True)
class TokenClaims:
    subject_id: str
    issued_at: int
    expires_at: int
    email: Optional[str] = None


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    return urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


class TokenIssuer:
    """Issues and verifies stateless, signed, time-bounded session tokens."""

    def __init__(
        self,
        secret: str,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        if default_ttl <= 0:
            raise ValueError("Token ttl must be positive")
        self._secret = secret.encode()
        self.default_ttl = default_ttl
        self._clock = clock

    def _sign(self, segment: str) -> str:
        return hmac.new(self._secret, segment.encode(), hashlib.sha256).hexdigest()

    def issue(
        self,
        subject_id: str,
        ttl: Optional[int] = None,
        *,
        email: Optional[str] = None,
    ) -> str:
        """Create a signed token for ``subject_id`` expiring after ``ttl`` seconds."""
        if ttl is None:
            ttl = self.default_ttl
        elif ttl <= 0:
            raise ValueError("Token ttl must be positive")
        now = int(self._clock())
        payload = {
            "sub": subject_id,
            "iat": now,
            "exp": now + ttl,
        }
        if email is not None:
            payload["email"] = email
        segment = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        return segment + "." + self._sign(segment)

    def decode(self, token: str) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``TokenMalformedError`` when the token cannot be split or
        decoded, ``TokenInvalidError`` on a signature mismatch and
        ``TokenExpiredError`` once ``exp`` has passed.
        """
        parts = (token or "").split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise TokenMalformedError()
        segment, signature = parts

        if not hmac.compare_digest(signature.encode(), self._sign(segment).encode()):
            raise TokenInvalidError()

        try:
            payload = json.loads(_b64decode(segment))
            claims = TokenClaims(
                subject_id=str(payload["sub"]),
                issued_at=int(payload.get("iat", 0)),
                expires_at=int(payload["exp"]),
                email=payload.get("email"),
            )
        except (binascii.Error, UnicodeDecodeError, ValueError, TypeError, KeyError) as exc:
            raise TokenMalformedError(f"Token payload is malformed: {exc}") from exc

        if self._clock() > claims.expires_at:
            raise TokenExpiredError()
        return claims

    def verify(self, token: str) -> str:
        """Verify token and return the subject id."""
        return self.decode(token).subject_id
