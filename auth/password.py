# auth/password.py
"""
Password hashing and strength rules, using bcrypt.
"""

from __future__ import annotations

import logging
import os

import bcrypt

_logger = logging.getLogger(__name__)

# Work factor. Tests lower it through FAIRWAY_BCRYPT_ROUNDS to stay fast.
DEFAULT_BCRYPT_ROUNDS = 12
MIN_BCRYPT_ROUNDS = 4

MIN_PASSWORD_LENGTH = 8


def get_bcrypt_rounds() -> int:
    """Get the bcrypt cost from environment (clamped to bcrypt's minimum)."""
    raw = os.environ.get("FAIRWAY_BCRYPT_ROUNDS")
    if not raw:
        return DEFAULT_BCRYPT_ROUNDS
    try:
        return max(MIN_BCRYPT_ROUNDS, int(raw))
    except ValueError:
        _logger.warning(f"FAIRWAY_BCRYPT_ROUNDS='{raw}' is not an integer; using {DEFAULT_BCRYPT_ROUNDS}")
        return DEFAULT_BCRYPT_ROUNDS


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Raises:
        ValueError: If password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")

    salt = bcrypt.gensalt(rounds=get_bcrypt_rounds())
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against its stored hash. Malformed hashes never match."""
    if not password or not password_hash:
        return False

    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        _logger.warning(f"Password verification error: {e}")
        return False


def is_password_strong(password: str) -> tuple[bool, str]:
    """
    Check a password against the signup rules.

    Requirements:
    - At least 8 characters
    - Contains at least one letter
    - Contains at least one digit

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password:
        return False, "Password cannot be empty"

    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    if not any(c.isalpha() for c in password):
        return False, "Password must contain at least one letter"

    if not any(c.isdigit() for c in password):
        return False, "Password must contain at least one digit"

    return True, ""
