# auth/service.py
"""
Authentication and account service.

Handles:
- User registration and lookup
- Password verification
- Profile updates
- Credit and subscription bookkeeping used by billing and analysis
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from auth.models import User, SUBSCRIPTION_FREE, SUBSCRIPTION_PRO
from auth.password import hash_password, verify_password, is_password_strong
from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)

# Profile fields a user may edit through update_profile
PROFILE_FIELDS = ("name", "handicap", "home_course", "ghin_number")


class AuthError(Exception):
    """Base authentication error."""

    code = "auth_error"


class UserExistsError(AuthError):
    """User with this email already exists."""

    code = "email_taken"


class WeakPasswordError(AuthError):
    """Password doesn't meet strength requirements."""

    code = "weak_password"


class InvalidCredentialsError(AuthError):
    """Invalid email or password."""

    code = "invalid_credentials"


class UserNotFoundError(AuthError):
    """No user with this ID."""

    code = "user_not_found"


class NoCreditsError(AuthError):
    """No analysis credits left."""

    code = "upgrade_required"


def create_user(
    email: str,
    password: str,
    name: Optional[str] = None,
    handicap: Optional[float] = None,
    ghin_number: Optional[str] = None,
) -> User:
    """
    Create a new user account with signup credits.

    Raises:
        UserExistsError: If email already registered
        WeakPasswordError: If password doesn't meet requirements
    """
    init_db()

    is_strong, error_msg = is_password_strong(password)
    if not is_strong:
        raise WeakPasswordError(error_msg)

    email = email.lower().strip()

    if get_user_by_email(email):
        raise UserExistsError("Email already registered")

    user = User.new(
        email=email,
        password_hash=hash_password(password),
        name=name,
        handicap=handicap,
        ghin_number=ghin_number,
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO users
            (id, email, password_hash, name, handicap, ghin_number, credits,
             subscription_status, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user.id,
                user.email,
                user.password_hash,
                user.name,
                user.handicap,
                user.ghin_number,
                user.credits,
                user.subscription_status,
                user.created_at.isoformat(),
                user.updated_at.isoformat(),
            ),
        )

    _logger.info(f"Created user: {email}")
    return user


def get_user_by_email(email: str) -> Optional[User]:
    """Get user by email address, or None."""
    init_db()
    email = email.lower().strip()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?",
            (email,),
        ).fetchone()

    return _row_to_user(row) if row else None


def get_user_by_id(user_id: str) -> Optional[User]:
    """Get user by ID, or None."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()

    return _row_to_user(row) if row else None


def get_user_by_subscription(subscription_id: str) -> Optional[User]:
    """Find the user holding a Stripe subscription."""
    if not subscription_id:
        return None
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE subscription_id = ?",
            (subscription_id,),
        ).fetchone()

    return _row_to_user(row) if row else None


def _row_to_user(row) -> User:
    """Convert a database row to a User object."""
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        name=row["name"],
        handicap=row["handicap"],
        home_course=row["home_course"],
        ghin_number=row["ghin_number"],
        credits=row["credits"],
        subscription_status=row["subscription_status"],
        subscription_id=row["subscription_id"],
        stripe_customer_id=row["stripe_customer_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def authenticate_user(email: str, password: str) -> User:
    """
    Authenticate user with email and password.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user = get_user_by_email(email)

    if not user:
        _logger.warning(f"Login attempt for non-existent user: {email}")
        raise InvalidCredentialsError("Invalid credentials")

    if not verify_password(password, user.password_hash):
        _logger.warning(f"Invalid password for user: {email}")
        raise InvalidCredentialsError("Invalid credentials")

    _logger.info(f"User authenticated: {email}")
    return user


def _update_columns(user_id: str, updates: dict) -> bool:
    """Write the given column values for a user. True if a row changed."""
    init_db()

    columns = [f"{column} = ?" for column in updates]
    params = list(updates.values())

    columns.append("updated_at = ?")
    params.append(datetime.utcnow().isoformat())
    params.append(user_id)

    with get_db() as conn:
        cursor = conn.execute(
            f"UPDATE users SET {', '.join(columns)} WHERE id = ?",
            params,
        )
        return cursor.rowcount > 0


def update_profile(user_id: str, **fields) -> User:
    """
    Update editable profile fields (name, handicap, home_course, ghin_number).

    Unknown fields raise ValueError; None values are ignored.

    Raises:
        UserNotFoundError: If the user does not exist
    """
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")

    updates = {k: v for k, v in fields.items() if v is not None}
    if updates and not _update_columns(user_id, updates):
        raise UserNotFoundError(f"User {user_id} not found")

    user = get_user_by_id(user_id)
    if not user:
        raise UserNotFoundError(f"User {user_id} not found")
    return user


def get_credits(user_id: str) -> int:
    init_db()

    with get_db() as conn:
        row = conn.execute("SELECT credits FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        raise UserNotFoundError(f"User {user_id} not found")
    return row["credits"]


def decrement_credits(user_id: str) -> int:
    """
    Consume one credit. The balance check and the charge are one UPDATE,
    so concurrent requests cannot spend the same credit twice.

    Returns:
        Remaining credits

    Raises:
        NoCreditsError: If the balance is already zero
        UserNotFoundError: If the user does not exist
    """
    init_db()

    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE users SET credits = credits - 1, updated_at = ?
            WHERE id = ? AND credits > 0
            """,
            (datetime.utcnow().isoformat(), user_id),
        )
        charged = cursor.rowcount == 1
        row = conn.execute("SELECT credits FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        raise UserNotFoundError(f"User {user_id} not found")
    if not charged:
        raise NoCreditsError(f"User {user_id} has no credits")
    return row["credits"]


def add_credits(user_id: str, amount: int) -> int:
    """
    Grant credits (e.g. after a one-time purchase).

    Returns:
        New credit balance
    """
    if amount <= 0:
        raise ValueError("Credit amount must be positive")
    init_db()

    with get_db() as conn:
        conn.execute(
            "UPDATE users SET credits = credits + ?, updated_at = ? WHERE id = ?",
            (amount, datetime.utcnow().isoformat(), user_id),
        )
        row = conn.execute("SELECT credits FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        raise UserNotFoundError(f"User {user_id} not found")

    _logger.info(f"Granted {amount} credit(s) to user {user_id}")
    return row["credits"]


def set_subscription(
    user_id: str,
    status: str,
    subscription_id: Optional[str] = None,
    stripe_customer_id: Optional[str] = None,
    credits: Optional[int] = None,
) -> bool:
    """
    Set a user's subscription status.

    Downgrading to free clears the stored subscription ID.

    Returns:
        True if updated, False if user not found
    """
    if status not in (SUBSCRIPTION_FREE, SUBSCRIPTION_PRO):
        raise ValueError(f"Invalid subscription status: {status}")

    updates = {"subscription_status": status}
    if status == SUBSCRIPTION_FREE:
        updates["subscription_id"] = None
    elif subscription_id is not None:
        updates["subscription_id"] = subscription_id
    if stripe_customer_id is not None:
        updates["stripe_customer_id"] = stripe_customer_id
    if credits is not None:
        updates["credits"] = credits

    updated = _update_columns(user_id, updates)
    if updated:
        _logger.info(f"Subscription for user {user_id} set to {status}")
    return updated
