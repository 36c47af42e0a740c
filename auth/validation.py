"""
Input validation for register / login.

Each function checks every field and returns the full list of
violations (empty when the input is acceptable), so a client sees all
problems in one response rather than only the first.
"""

from __future__ import annotations

import re
from typing import List, Optional

from auth.errors import FieldError
from auth.password import MAX_PASSWORD_BYTES

EMAIL_REGEX = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
USERNAME_REGEX = re.compile(r"[a-zA-Z0-9_]+")
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30

MSG_REQUIRED = "This field is required"
MSG_INVALID_EMAIL = "Please enter a valid email address"
MSG_EMAIL_TOO_LONG = f"Email must not exceed {EMAIL_MAX_LENGTH} characters"
MSG_PASSWORD_TOO_SHORT = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
MSG_PASSWORD_TOO_LONG = f"Password must not exceed {MAX_PASSWORD_BYTES} bytes"
MSG_USERNAME_TOO_SHORT = f"Username must be at least {USERNAME_MIN_LENGTH} characters long"
MSG_USERNAME_TOO_LONG = f"Username must not exceed {USERNAME_MAX_LENGTH} characters"
MSG_USERNAME_CHARS = "Username may only contain letters, numbers, and underscores"


def normalize_email(email: Optional[str]) -> str:
    """Emails are unique case-insensitively, so they are stored lower-cased."""
    return (email or "").strip().lower()


def _check_email(email: Optional[str]) -> Optional[FieldError]:
    if not email or not email.strip():
        return FieldError("email", MSG_REQUIRED)
    if len(email.strip()) > EMAIL_MAX_LENGTH:
        return FieldError("email", MSG_EMAIL_TOO_LONG)
    if not EMAIL_REGEX.fullmatch(email.strip()):
        return FieldError("email", MSG_INVALID_EMAIL)
    return None


def _check_password(password: Optional[str]) -> Optional[FieldError]:
    if not password:
        return FieldError("password", MSG_REQUIRED)
    if len(password) < PASSWORD_MIN_LENGTH:
        return FieldError("password", MSG_PASSWORD_TOO_SHORT)
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        return FieldError("password", MSG_PASSWORD_TOO_LONG)
    return None


def _check_username(username: Optional[str]) -> Optional[FieldError]:
    if not username:
        return FieldError("username", MSG_REQUIRED)
    if len(username) < USERNAME_MIN_LENGTH:
        return FieldError("username", MSG_USERNAME_TOO_SHORT)
    if len(username) > USERNAME_MAX_LENGTH:
        return FieldError("username", MSG_USERNAME_TOO_LONG)
    if not USERNAME_REGEX.fullmatch(username):
        return FieldError("username", MSG_USERNAME_CHARS)
    return None


def validate_registration(
    email: Optional[str],
    password: Optional[str],
    username: Optional[str],
) -> List[FieldError]:
    checks = (_check_email(email), _check_password(password), _check_username(username))
    return [err for err in checks if err is not None]


def validate_login(email: Optional[str], password: Optional[str]) -> List[FieldError]:
    errors: List[FieldError] = []
    email_error = _check_email(email)
    if email_error:
        errors.append(email_error)
    if not password:
        errors.append(FieldError("password", MSG_REQUIRED))
    return errors
