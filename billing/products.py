# billing/products.py
"""
Stripe product and price configuration.

Products:
- single: one full analysis (one-time payment, +1 credit)
- monthly: Pro subscription, unlimited analyses
- yearly: Pro subscription, unlimited analyses

Price IDs are set via environment variables so test and live
Stripe accounts can differ.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

MODE_PAYMENT = "payment"
MODE_SUBSCRIPTION = "subscription"


@dataclass(frozen=True)
class Plan:
    """Purchasable plan configuration."""
    price_type: str
    name: str
    price_env: str
    amount_cents: int  # For display purposes
    mode: str
    credits_granted: int = 0
    interval: Optional[str] = None
    currency: str = "usd"

    @property
    def price_id(self) -> str:
        return os.environ.get(self.price_env, "")

    @property
    def is_subscription(self) -> bool:
        return self.mode == MODE_SUBSCRIPTION


PLANS = {
    "single": Plan(
        price_type="single",
        name="Single Strategy",
        price_env="STRIPE_PRICE_CREDITS",
        amount_cents=500,
        mode=MODE_PAYMENT,
        credits_granted=1,
    ),
    "monthly": Plan(
        price_type="monthly",
        name="Pro Monthly",
        price_env="STRIPE_PRICE_MONTHLY",
        amount_cents=1000,
        mode=MODE_SUBSCRIPTION,
        interval="month",
    ),
    "yearly": Plan(
        price_type="yearly",
        name="Pro Yearly",
        price_env="STRIPE_PRICE_YEARLY",
        amount_cents=5000,
        mode=MODE_SUBSCRIPTION,
        interval="year",
    ),
}

# Older clients sent "credits" for the single purchase
PRICE_TYPE_ALIASES = {"credits": "single"}


def get_plan(price_type: str) -> Optional[Plan]:
    """Get plan configuration for a price type, or None if unknown."""
    if not price_type:
        return None
    key = price_type.lower().strip()
    key = PRICE_TYPE_ALIASES.get(key, key)
    return PLANS.get(key)


def list_plans() -> list[dict]:
    """Plans in display order, for a pricing page."""
    return [
        {
            "priceType": plan.price_type,
            "name": plan.name,
            "amountCents": plan.amount_cents,
            "currency": plan.currency,
            "interval": plan.interval,
            "subscription": plan.is_subscription,
        }
        for plan in PLANS.values()
    ]
