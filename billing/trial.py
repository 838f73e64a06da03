# billing/trial.py
"""
Trial / discount code activation.

A valid code grants Pro status and a block of credits, the same
entitlement a paid subscription gives.
"""

from __future__ import annotations

import hmac
import logging
import os

from auth.models import SUBSCRIPTION_PRO
from auth.service import UserNotFoundError, set_subscription

_logger = logging.getLogger(__name__)

DEFAULT_TRIAL_CODE = "GOLFBETA2026"
TRIAL_CREDITS = 99


class InvalidCodeError(Exception):
    """Code does not match any active trial code."""

    code = "invalid_code"


def get_trial_code() -> str:
    return os.environ.get("TRIAL_CODE") or DEFAULT_TRIAL_CODE


def is_valid_code(code: str) -> bool:
    """Case-insensitive, whitespace-tolerant code check."""
    if not code:
        return False
    submitted = code.strip().upper().encode("utf-8")
    expected = get_trial_code().strip().upper().encode("utf-8")
    return hmac.compare_digest(submitted, expected)


def activate_trial(user_id: str, code: str) -> None:
    """
    Grant Pro access for a valid trial code.

    Raises:
        InvalidCodeError: If the code is wrong
        UserNotFoundError: If the user does not exist
    """
    if not is_valid_code(code):
        _logger.warning(f"Invalid trial code attempt for user {user_id}")
        raise InvalidCodeError("Invalid trial code")

    if not set_subscription(user_id, SUBSCRIPTION_PRO, credits=TRIAL_CREDITS):
        raise UserNotFoundError(f"User {user_id} not found")

    _logger.info(f"Trial activated for user {user_id}")
