"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.errors import TokenMalformedError
from auth.service import AuthService

_bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    """The ``AuthService`` built by ``create_app`` for this application."""
    return request.app.state.auth_service


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise TokenMalformedError("Missing Bearer token")
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> str:
    """
    Extract and verify the Bearer token, returning the authenticated
    user id.  Protected routes elsewhere in the app depend on this.
    """
    return service.authenticate(token)
