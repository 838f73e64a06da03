# billing/webhooks.py
"""
Stripe webhook handling with signature verification.

Security:
- All webhooks verified using Stripe signing secret
- Never trust unverified payloads
- Log all webhook events for audit trail
"""

from __future__ import annotations

import json
import logging
from typing import Tuple

import stripe

from billing.stripe_client import get_webhook_secret
from billing.service import (
    handle_checkout_completed,
    handle_subscription_deleted,
    handle_payment_failed,
)

_logger = logging.getLogger(__name__)


class WebhookError(Exception):
    """Webhook processing error."""
    pass


class SignatureVerificationError(WebhookError):
    """Webhook signature verification failed."""
    pass


def verify_webhook_signature(payload: bytes, signature: str) -> dict:
    """
    Verify Stripe webhook signature and parse event.

    Args:
        payload: Raw request body bytes
        signature: Stripe-Signature header value

    Returns:
        Parsed event dict

    Raises:
        SignatureVerificationError: If signature is invalid
        WebhookError: If the payload cannot be parsed
    """
    webhook_secret = get_webhook_secret()
    if not webhook_secret:
        raise SignatureVerificationError("Webhook secret not configured")

    try:
        body = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            body, signature, webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
        )
    except stripe.SignatureVerificationError as e:
        _logger.warning(f"Webhook signature verification failed: {e}")
        raise SignatureVerificationError("Invalid webhook signature")
    except UnicodeDecodeError as e:
        raise WebhookError(f"Failed to parse webhook: {e}")

    try:
        event = json.loads(body)
    except ValueError as e:
        _logger.error(f"Webhook parsing error: {e}")
        raise WebhookError(f"Failed to parse webhook: {e}")

    if not isinstance(event, dict):
        raise WebhookError("Webhook payload is not an event object")
    return event


def process_webhook_event(event: dict) -> Tuple[bool, str]:
    """
    Process a verified Stripe webhook event.

    Returns:
        Tuple of (success, message)
    """
    event_type = event.get("type", "unknown")
    event_id = event.get("id", "unknown")

    _logger.info(f"Processing webhook event: {event_type}", extra={"event_id": event_id})

    handlers = {
        "checkout.session.completed": handle_checkout_completed,
        "customer.subscription.deleted": handle_subscription_deleted,
        "invoice.payment_failed": handle_payment_failed,
    }

    handler = handlers.get(event_type)

    if handler is None:
        # Acknowledge, but nothing to do
        _logger.debug(f"Unhandled webhook event type: {event_type}")
        return True, f"Event type {event_type} not handled"

    data_object = (event.get("data") or {}).get("object") or {}

    try:
        success = handler(data_object)
    except Exception as e:
        _logger.error(f"Webhook handler error for {event_type}: {e}")
        return False, f"Handler error: {e}"

    if success:
        return True, f"Successfully processed {event_type}"
    return False, f"Handler returned failure for {event_type}"
