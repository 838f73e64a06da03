# billing/__init__.py
"""
Billing module for Stripe payments.

Provides:
- Stripe Checkout session creation (credits and Pro subscriptions)
- Webhook handling for checkout and subscription events
- Trial code activation
"""

from billing.service import (
    create_checkout_session,
    handle_checkout_completed,
    handle_subscription_deleted,
    handle_payment_failed,
    get_customer_portal_url,
)
from billing.trial import activate_trial

__all__ = [
    "create_checkout_session",
    "handle_checkout_completed",
    "handle_subscription_deleted",
    "handle_payment_failed",
    "get_customer_portal_url",
    "activate_trial",
]
