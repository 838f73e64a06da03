"""
Payments API endpoints.

Checkout, trial codes, Stripe webhooks and the status endpoint the
client polls after returning from checkout.
"""

import logging
import os

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel

from app.config import DEFAULT_FRONTEND_URL
from app.errors import error_response
from auth.middleware import get_required_user
from auth.models import User
from auth.service import UserNotFoundError
from billing.products import list_plans
from billing.service import (
    BillingDisabledError,
    BillingError,
    CheckoutError,
    UnknownPlanError,
    create_checkout_session,
    get_customer_portal_url,
)
from billing.trial import InvalidCodeError, activate_trial
from billing.webhooks import (
    SignatureVerificationError,
    WebhookError,
    process_webhook_event,
    verify_webhook_signature,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


def _frontend_url() -> str:
    return os.environ.get("FRONTEND_URL", DEFAULT_FRONTEND_URL).rstrip("/")


class CheckoutRequest(BaseModel):
    priceType: str


class TrialRequest(BaseModel):
    code: str


@router.get("/plans")
async def get_plans():
    """Purchasable plans with display prices."""
    return {"plans": list_plans()}


@router.post("/create-checkout")
async def create_checkout(request: CheckoutRequest, user: User = Depends(get_required_user)):
    """Start a Stripe Checkout session; the client navigates to `url`."""
    try:
        result = create_checkout_session(user, request.priceType, _frontend_url())
    except UnknownPlanError as e:
        return error_response(400, str(e), e.code)
    except BillingDisabledError as e:
        return error_response(503, "Payments are not available", e.code)
    except CheckoutError as e:
        return error_response(502, "Failed to create checkout session", e.code)

    return {"url": result["checkout_url"], "sessionId": result["session_id"]}


@router.post("/activate-trial")
async def post_activate_trial(request: TrialRequest, user: User = Depends(get_required_user)):
    """Redeem a trial code for Pro access."""
    try:
        activate_trial(user.id, request.code)
    except InvalidCodeError as e:
        return error_response(400, str(e), e.code)
    except UserNotFoundError as e:
        return error_response(404, "User not found", e.code)

    return {"success": True, "message": "Pro access activated"}


@router.get("/status")
async def payment_status(user: User = Depends(get_required_user)):
    """Current entitlement, polled after a checkout redirect."""
    return {
        "subscriptionStatus": user.subscription_status,
        "credits": user.credits_display,
        "canAnalyze": user.can_analyze,
    }


@router.post("/customer-portal")
async def customer_portal(user: User = Depends(get_required_user)):
    """Stripe billing portal for managing a subscription."""
    try:
        url = get_customer_portal_url(user.id, return_url=_frontend_url())
    except BillingError as e:
        status = 503 if isinstance(e, BillingDisabledError) else 400
        return error_response(status, str(e), e.code)

    return {"url": url}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(default="", alias="Stripe-Signature"),
):
    """
    Stripe webhook receiver.

    Signature is checked against the raw body. Handler failures return 500
    so Stripe retries delivery.
    """
    payload = await request.body()

    try:
        event = verify_webhook_signature(payload, stripe_signature)
    except SignatureVerificationError as e:
        return error_response(400, str(e), "invalid_signature")
    except WebhookError as e:
        return error_response(400, str(e), "invalid_payload")

    success, message = process_webhook_event(event)
    if not success:
        logger.error(f"Webhook processing failed: {message}")
        return error_response(500, message, "webhook_failed")

    return {"received": True}
