# billing/service.py
"""
Billing service for Stripe checkout and subscription management.

Handles:
- Checkout session creation (one-time credits and Pro subscriptions)
- Checkout / subscription event processing
- Customer portal links
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.models import User, SUBSCRIPTION_FREE, SUBSCRIPTION_PRO
from auth.service import (
    add_credits,
    get_user_by_id,
    get_user_by_subscription,
    set_subscription,
)
from billing.products import get_plan
from billing.stripe_client import get_stripe, is_billing_enabled

_logger = logging.getLogger(__name__)

# Query parameter the frontend reads after returning from Stripe
PAYMENT_SUCCESS_PARAM = "payment=success"


class BillingError(Exception):
    """Base billing error."""

    code = "billing_error"


class BillingDisabledError(BillingError):
    """Billing is not enabled."""

    code = "billing_disabled"


class UnknownPlanError(BillingError):
    """Requested price type does not exist or has no price configured."""

    code = "invalid_price_type"


class CheckoutError(BillingError):
    """Checkout session creation failed."""

    code = "checkout_creation_failed"


class NoSubscriptionError(BillingError):
    """User has no subscription to manage."""

    code = "no_subscription"


def success_url_for(frontend_url: str) -> str:
    separator = "&" if "?" in frontend_url else "?"
    return f"{frontend_url}{separator}{PAYMENT_SUCCESS_PARAM}"


def create_checkout_session(user: User, price_type: str, frontend_url: str) -> dict:
    """
    Create a Stripe Checkout session for a plan.

    Args:
        user: Purchasing user (ID stored in metadata for the webhook)
        price_type: "single", "monthly" or "yearly"
        frontend_url: App URL; success returns to it with ?payment=success

    Returns:
        Dict with session_id and checkout_url

    Raises:
        UnknownPlanError: If the price type is unknown or unpriced
        BillingDisabledError: If billing is not enabled
        CheckoutError: If session creation fails
    """
    plan = get_plan(price_type)
    if plan is None or not plan.price_id:
        raise UnknownPlanError(f"Invalid price type: {price_type}")

    if not is_billing_enabled():
        raise BillingDisabledError("Billing is not enabled. Check STRIPE_SECRET_KEY.")

    session_params = {
        "mode": plan.mode,
        "line_items": [{"price": plan.price_id, "quantity": 1}],
        "success_url": success_url_for(frontend_url),
        "cancel_url": frontend_url,
        "metadata": {
            "user_id": user.id,
            "price_type": plan.price_type,
        },
    }

    if user.stripe_customer_id:
        session_params["customer"] = user.stripe_customer_id
    else:
        session_params["customer_email"] = user.email

    if plan.is_subscription:
        session_params["subscription_data"] = {"metadata": {"user_id": user.id}}

    try:
        stripe = get_stripe()
        session = stripe.checkout.Session.create(**session_params)
    except Exception as e:
        _logger.error(f"Checkout session creation failed: {e}")
        raise CheckoutError(f"Failed to create checkout session: {e}")

    _logger.info(
        f"Created checkout session for user {user.id}",
        extra={"session_id": session.id, "price_type": plan.price_type},
    )

    return {
        "session_id": session.id,
        "checkout_url": session.url,
    }


def handle_checkout_completed(session: dict) -> bool:
    """
    Handle checkout.session.completed webhook event.

    One-time purchases grant credits; subscriptions grant Pro.

    Returns:
        True if handled successfully
    """
    metadata = session.get("metadata") or {}
    user_id = metadata.get("user_id")
    if not user_id:
        _logger.warning("Checkout completed without user_id in metadata")
        return False

    plan = get_plan(metadata.get("price_type", ""))
    if plan is None:
        _logger.warning(f"Checkout completed with unknown price type for user {user_id}")
        return False

    _logger.info(
        f"Processing checkout completed for user {user_id}",
        extra={"price_type": plan.price_type, "customer_id": session.get("customer")},
    )

    if plan.is_subscription:
        return set_subscription(
            user_id,
            SUBSCRIPTION_PRO,
            subscription_id=session.get("subscription"),
            stripe_customer_id=session.get("customer"),
        )

    add_credits(user_id, plan.credits_granted)
    return True


def handle_subscription_deleted(subscription: dict) -> bool:
    """
    Handle customer.subscription.deleted webhook event.

    Downgrades the user to free.
    """
    user_id = (subscription.get("metadata") or {}).get("user_id")

    if not user_id:
        user = get_user_by_subscription(subscription.get("id"))
        user_id = user.id if user else None

    if not user_id:
        _logger.warning("Subscription deleted but no user found")
        return False

    _logger.info(f"Processing subscription deletion for user {user_id}")
    return set_subscription(user_id, SUBSCRIPTION_FREE)


def handle_payment_failed(invoice: dict) -> bool:
    """
    Handle invoice.payment_failed webhook event.

    Downgrades immediately; there is no grace period.
    """
    subscription_id = invoice.get("subscription")
    if not subscription_id:
        return False

    user = get_user_by_subscription(subscription_id)
    if not user:
        _logger.warning(f"Payment failed but no user found for subscription {subscription_id}")
        return False

    _logger.info(f"Processing payment failure for user {user.id}")
    return set_subscription(user.id, SUBSCRIPTION_FREE)


def get_customer_portal_url(user_id: str, return_url: str) -> Optional[str]:
    """
    Create a Stripe Customer Portal session URL.

    Raises:
        NoSubscriptionError: If the user has no subscription
        BillingDisabledError: If billing is not enabled
    """
    user = get_user_by_id(user_id)
    if not user or not user.subscription_id:
        raise NoSubscriptionError("No active subscription")

    if not is_billing_enabled():
        raise BillingDisabledError("Billing is not enabled. Check STRIPE_SECRET_KEY.")

    stripe = get_stripe()
    customer_id = user.stripe_customer_id
    if not customer_id:
        subscription = stripe.Subscription.retrieve(user.subscription_id)
        customer_id = subscription.customer

    session = stripe.billing_portal.Session.create(
        customer=customer_id,
        return_url=return_url,
    )
    return session.url
