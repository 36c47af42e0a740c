"""
Auth API routes — register, login, refresh, me.

Route prefix: /api/auth
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from api.dependencies import get_auth_service, get_bearer_token
from auth.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserData,
    UserResponse,
)
from auth.service import AuthService

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user."""
    result = await service.register(req.email, req.password, req.username)
    return AuthResponse(message="User registered successfully", data=result)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return AuthResponse(message="Login successful", data=result)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Exchange a valid token for a fresh one."""
    result = await service.refresh(token)
    return AuthResponse(message="Token refreshed", data=result)


@router.get("/me", response_model=UserResponse)
async def me(
    token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Return the user the Bearer token belongs to."""
    user = await service.current_user(token)
    return UserResponse(data=UserData(user=user))
