# paywall/gate.py
"""
Paywall gate.

`decide()` is a pure function of the session. `PaywallGate` wraps it for
one flow and owns the paywall's visibility, which cannot be dismissed
while payment is required and not yet granted.
"""
from __future__ import annotations

import logging

from paywall.models import EntitlementDecision, Session
from paywall.session import SessionStore

_logger = logging.getLogger(__name__)


def decide(
    session: Session,
    flow_requires_payment: bool,
    teaser_available: bool = True,
) -> EntitlementDecision:
    if not flow_requires_payment:
        return EntitlementDecision.GRANTED

    profile = session.profile
    if profile is None:
        if teaser_available:
            return EntitlementDecision.PREVIEW_ONLY
        return EntitlementDecision.DENIED

    if profile.is_entitled:
        return EntitlementDecision.GRANTED
    return EntitlementDecision.PREVIEW_ONLY


class PaywallGate:
    """Entitlement for one flow, re-evaluated on every read."""

    def __init__(
        self,
        store: SessionStore,
        flow_requires_payment: bool = True,
        teaser_available: bool = True,
    ):
        self._store = store
        self.flow_requires_payment = flow_requires_payment
        self.teaser_available = teaser_available
        self._visible = False
        self._unlocked = False

    @property
    def decision(self) -> EntitlementDecision:
        return decide(self._store.session, self.flow_requires_payment, self.teaser_available)

    @property
    def is_granted(self) -> bool:
        return self.decision == EntitlementDecision.GRANTED

    @property
    def can_close(self) -> bool:
        if self._unlocked:
            return True
        return not (self.flow_requires_payment and not self.is_granted)

    @property
    def visible(self) -> bool:
        return self._visible

    def show(self) -> None:
        self._visible = True
        self._unlocked = False

    def mark_unlocked(self) -> None:
        """The gated content was paid for; spending the last credit must not re-block it."""
        self._unlocked = True
        self._visible = False

    def close(self) -> bool:
        """Dismiss the paywall. Returns False (and stays open) while blocked."""
        if not self.can_close:
            _logger.debug("Paywall close ignored: payment required")
            return False
        self._visible = False
        return True
