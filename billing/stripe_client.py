# billing/stripe_client.py
"""
Stripe SDK initialization and configuration.

Environment variables:
- STRIPE_SECRET_KEY: Stripe API secret key (required for checkout)
- STRIPE_WEBHOOK_SECRET: Webhook signing secret (required for webhooks)
- STRIPE_TEST_MODE: Set to "true" to use test mode (default: true)
"""

from __future__ import annotations

import logging
import os

import stripe

_logger = logging.getLogger(__name__)

STRIPE_API_VERSION = "2023-10-16"


def get_stripe_key() -> str:
    """Get Stripe secret key from environment."""
    return os.environ.get("STRIPE_SECRET_KEY", "")


def get_webhook_secret() -> str:
    """Get Stripe webhook signing secret from environment."""
    return os.environ.get("STRIPE_WEBHOOK_SECRET", "")


def is_test_mode() -> bool:
    """Check if running in Stripe test mode."""
    return os.environ.get("STRIPE_TEST_MODE", "true").lower() == "true"


def is_billing_enabled() -> bool:
    """Check if billing is enabled (Stripe key configured)."""
    key = get_stripe_key()
    return bool(key and len(key) > 10)


def init_stripe() -> bool:
    """
    Initialize Stripe SDK with API key.

    Returns:
        True if initialized successfully, False otherwise
    """
    key = get_stripe_key()
    if not key:
        _logger.warning("STRIPE_SECRET_KEY not set. Billing disabled.")
        return False

    stripe.api_key = key
    stripe.api_version = STRIPE_API_VERSION

    mode = "test" if is_test_mode() else "live"
    _logger.info(f"Stripe initialized in {mode} mode")

    return True


def get_stripe():
    """
    Get initialized Stripe module.

    Raises:
        RuntimeError: If Stripe is not configured
    """
    if not stripe.api_key:
        if not init_stripe():
            raise RuntimeError("Stripe not initialized. Check STRIPE_SECRET_KEY.")

    return stripe
