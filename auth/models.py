"""Domain records handled by the auth flow.

``Identity`` is the transient copy of a stored user that the service
works with during a request; ``PublicUser`` is the projection returned to
clients (never includes the password hash).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import BaseModel


@dataclass(frozen=True)
class Identity:
    email: str
    username: str
    password_hash: str = field(repr=False)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def public(self) -> "PublicUser":
        return PublicUser(id=self.id, email=self.email, username=self.username)


class PublicUser(BaseModel):
    id: str
    email: str
    username: str


class AuthResult(BaseModel):
    token: str
    user: PublicUser
