# auth/tokens.py
"""
JWT bearer tokens.

Tokens are stateless: logout is client-side token deletion.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

_logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 30

# Development fallback only; production sets JWT_SECRET
DEV_JWT_SECRET = "fairway-dev-secret-change-me"


def get_jwt_secret() -> str:
    return os.environ.get("JWT_SECRET") or DEV_JWT_SECRET


def create_access_token(user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token for a user."""
    expire = datetime.utcnow() + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    claims = {"sub": user_id, "email": email, "exp": expire}
    return jwt.encode(claims, get_jwt_secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a token. Returns None if invalid or expired."""
    if not token:
        return None
    try:
        return jwt.decode(token, get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError as e:
        _logger.debug(f"Rejected access token: {e}")
        return None


def user_id_from_token(token: str) -> Optional[str]:
    payload = decode_access_token(token)
    if not payload:
        return None
    return payload.get("sub")
