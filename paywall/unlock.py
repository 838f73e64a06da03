# paywall/unlock.py
"""
Unlock orchestrator.

Commits a pending preview to the account once the session is entitled,
and reveals the full analysis.

States:
    IDLE -> AWAITING_ENTITLEMENT -> COMMITTING -> DONE
                                        |
                                        +-> FAILED (retry() -> COMMITTING)

A failed commit that leaves the session unentitled (a 401 expires it)
goes back to AWAITING_ENTITLEMENT, so the next login commits the preview.

A pending result is committed at most once: the commit handler takes it
out of the holder before its first await, so a duplicate session-change
notification finds nothing to commit.
"""
from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import parse_qs, urlsplit

from paywall.api import BackendClient
from paywall.errors import CommitError, PaywallError, SessionExpiredError
from paywall.gate import decide
from paywall.models import EntitlementDecision, SessionChange
from paywall.pending import PendingResultHolder
from paywall.session import SessionStore

_logger = logging.getLogger(__name__)

PAYMENT_PARAM = "payment"
PAYMENT_SUCCESS = "success"

RevealCallback = Callable[[Dict[str, Any]], Any]


class UnlockState(str, Enum):
    IDLE = "idle"
    AWAITING_ENTITLEMENT = "awaiting_entitlement"
    COMMITTING = "committing"
    DONE = "done"
    FAILED = "failed"


def is_payment_success(redirect: Union[str, Mapping[str, Any]]) -> bool:
    """True for a checkout return URL (or parsed query) carrying payment=success."""
    if isinstance(redirect, str):
        query = parse_qs(urlsplit(redirect).query)
        values = query.get(PAYMENT_PARAM, [])
    else:
        value = redirect.get(PAYMENT_PARAM)
        values = value if isinstance(value, (list, tuple)) else [value]
    return PAYMENT_SUCCESS in values


class UnlockOrchestrator:
    def __init__(
        self,
        store: SessionStore,
        pending: PendingResultHolder,
        api: BackendClient,
        flow_requires_payment: bool = True,
        on_reveal: Optional[RevealCallback] = None,
    ):
        self._store = store
        self._pending = pending
        self._api = api
        self.flow_requires_payment = flow_requires_payment
        self._on_reveal = on_reveal

        self.state = UnlockState.IDLE
        self.revealed: Optional[Dict[str, Any]] = None
        self.analysis_id: Optional[str] = None
        self.last_error: Optional[CommitError] = None

        self._unsubscribe = store.subscribe(self.on_session_changed)

    def close(self) -> None:
        """Stop observing the session store."""
        self._unsubscribe()

    @property
    def decision(self) -> EntitlementDecision:
        return decide(self._store.session, self.flow_requires_payment)

    def _transition(self, state: UnlockState) -> None:
        if state != self.state:
            _logger.info(f"Unlock {self.state.value} -> {state.value}")
            self.state = state

    async def begin(self) -> UnlockState:
        """
        Start watching after a preview was stored. Commits right away when
        the session is already entitled.
        """
        if not self._pending.has_pending:
            if self.state != UnlockState.DONE:
                self._transition(UnlockState.IDLE)
            return self.state

        self._transition(UnlockState.AWAITING_ENTITLEMENT)
        if self.decision == EntitlementDecision.GRANTED:
            await self._commit()
        return self.state

    async def resume(self) -> UnlockState:
        """Pick up a durable pending preview after a page load."""
        if self.state in (UnlockState.IDLE, UnlockState.DONE):
            return await self.begin()
        return self.state

    async def on_session_changed(self, change: SessionChange) -> None:
        if self.state != UnlockState.AWAITING_ENTITLEMENT:
            return
        if self.decision != EntitlementDecision.GRANTED:
            return
        await self._commit()

    async def handle_payment_redirect(self, redirect: Union[str, Mapping[str, Any]]) -> bool:
        """
        Handle the return from checkout. On payment=success the profile is
        refreshed, which commits any pending preview through the session
        listener.
        """
        if not is_payment_success(redirect):
            return False
        await self.resume()
        await self._store.refresh_profile()
        return True

    async def activate_code(self, code: str) -> None:
        """
        Redeem a trial code, then refresh the profile.

        Raises:
            CodeError: If the code is not valid
        """
        token = self._store.session.token
        if token is None:
            raise SessionExpiredError("Log in to redeem a code")
        try:
            await self._api.activate_trial(token, code)
        except SessionExpiredError:
            await self._store.expire()
            raise
        await self._store.refresh_profile()

    async def retry(self) -> UnlockState:
        if self.state == UnlockState.FAILED:
            await self._commit()
        return self.state

    async def _commit(self) -> None:
        pending = self._pending.take()
        if pending is None:
            return
        self._transition(UnlockState.COMMITTING)

        try:
            token = self._store.session.token
            if token is None:
                raise CommitError("Not logged in")
            saved = await self._api.save_analysis(token, pending)
        except PaywallError as e:
            # A preview stored while the save was in flight is newer; keep it
            if self._pending.restore() is None:
                self._pending.put(pending)
            self.last_error = e if isinstance(e, CommitError) else CommitError(str(e))
            _logger.error(f"Committing pending analysis failed: {e}")

            if isinstance(e, SessionExpiredError):
                # Set before expire() notifies, so the next login commits
                self._transition(UnlockState.AWAITING_ENTITLEMENT)
                await self._store.expire()
            if self.decision != EntitlementDecision.GRANTED:
                self._transition(UnlockState.AWAITING_ENTITLEMENT)
                return

            self._transition(UnlockState.FAILED)
            await self._reveal(pending.payload)
            return

        self.analysis_id = saved.analysisId
        self.last_error = None
        self._transition(UnlockState.DONE)
        await self._store.update_credits(saved.creditsRemaining)
        await self._reveal(pending.payload)

    async def _reveal(self, payload: Dict[str, Any]) -> None:
        self.revealed = payload
        if self._on_reveal is not None:
            result = self._on_reveal(payload)
            if inspect.isawaitable(result):
                await result
