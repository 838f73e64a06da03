# auth/middleware.py
"""
FastAPI authentication dependencies.

Provides:
- Bearer token extraction
- Required / optional current-user dependencies
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.models import User
from auth.service import get_user_by_id
from auth.tokens import user_id_from_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(token: Optional[str]) -> Optional[User]:
    """
    Get the user a bearer token belongs to.

    Returns None for a missing, invalid or expired token, or a deleted user.
    """
    if not token:
        return None

    user_id = user_id_from_token(token)
    if not user_id:
        return None

    return get_user_by_id(user_id)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[User]:
    """
    FastAPI dependency: Get current user if a valid token was sent.

    An invalid token is treated as anonymous (no error).
    """
    if credentials is None:
        return None
    return get_current_user(credentials.credentials)


async def get_required_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    FastAPI dependency: Get current user (required).

    Raises 401 if no token was sent or it is invalid/expired.
    """
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail={"error": "Authentication required", "code": "auth_required"},
        )

    user = get_current_user(credentials.credentials)
    if not user:
        raise HTTPException(
            status_code=401,
            detail={"error": "Invalid or expired token", "code": "invalid_token"},
        )

    request.state.user_id = user.id
    return user
