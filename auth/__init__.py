# auth/__init__.py
"""
Authentication module.

Provides:
- User model with email/password auth
- JWT bearer tokens
- Password hashing with bcrypt
- Credit and subscription bookkeeping
"""

from auth.models import User
from auth.service import (
    AuthError,
    create_user,
    authenticate_user,
    get_user_by_id,
    update_profile,
)
from auth.tokens import create_access_token, decode_access_token

__all__ = [
    "User",
    "AuthError",
    "create_user",
    "authenticate_user",
    "get_user_by_id",
    "update_profile",
    "create_access_token",
    "decode_access_token",
]
