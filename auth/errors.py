"""
Authentication error taxonomy.

Every failure the auth flow can produce is one of these types.  Each
carries the HTTP status and a stable machine-readable ``code`` so the
API layer can map it to the failure envelope without inspecting
messages.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class AuthError(Exception):
    """Base exception for the auth flow."""

    status_code: int = 500
    code: str = "auth_error"
    message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)

    @property
    def error(self) -> str:
        return str(self)

    def details(self) -> List[Dict[str, Any]]:
        return []


class InvalidInputError(ValueError):
    """Input the credential hasher refuses to process (empty or over-long)."""


class ValidationFailedError(AuthError):
    status_code = 400
    code = "validation_failed"
    message = "Validation failed"

    def __init__(self, fields: Sequence[FieldError]):
        super().__init__()
        self.fields = list(fields)

    def details(self) -> List[Dict[str, Any]]:
        return [asdict(f) for f in self.fields]


class ConflictError(AuthError):
    status_code = 400
    code = "conflict"
    message = "User already exists"

    def __init__(self, field: str):
        super().__init__(f"A user with this {field} already exists")
        self.field = field

    def details(self) -> List[Dict[str, Any]]:
        return [{"field": self.field, "message": str(self)}]


class InvalidCredentialsError(AuthError):
    status_code = 401
    code = "invalid_credentials"
    message = "Invalid credentials"


class TokenError(AuthError):
    status_code = 401
    code = "token_error"
    message = "Unauthorized access"


class TokenExpiredError(TokenError):
    code = "token_expired"
    message = "Token has expired"


class TokenInvalidError(TokenError):
    code = "token_invalid"
    message = "Token signature is invalid"


class TokenMalformedError(TokenError):
    code = "token_malformed"
    message = "Token is malformed"


class StoreUnavailableError(AuthError):
    status_code = 500
    code = "store_unavailable"
    message = "User store is unavailable"
