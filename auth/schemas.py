"""
Request / response schemas for the auth routes.

Request fields are optional at the schema level: missing or malformed
values are reported by ``auth.validation`` together with every other
violation instead of being rejected one at a time by FastAPI.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from auth.models import AuthResult, PublicUser


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    data: AuthResult


class UserData(BaseModel):
    user: PublicUser


class UserResponse(BaseModel):
    success: bool = True
    data: UserData


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    code: str
    details: List[Dict[str, Any]] = Field(default_factory=list)
