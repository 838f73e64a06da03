# paywall/flow.py
"""
End-to-end analysis flow: wizard -> gate -> analysis -> result or paywall.

Entitled users get a full analysis that the server saves and charges in
one call. Everyone else gets a preview, which is parked in the pending
holder while the paywall routes them through signup or payment; the
unlock orchestrator commits it once the session is entitled.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from paywall.actions import AsyncAction
from paywall.api import BackendClient
from paywall.config import ClientConfig
from paywall.errors import SessionExpiredError, UpgradeRequiredError
from paywall.gate import PaywallGate
from paywall.models import EntitlementDecision
from paywall.pending import PendingResultHolder
from paywall.session import SessionStore
from paywall.storage import Storage
from paywall.unlock import UnlockOrchestrator, UnlockState
from paywall.wizard import FormWizard

_logger = logging.getLogger(__name__)


class AnalysisFlow:
    def __init__(
        self,
        api: BackendClient,
        storage: Storage,
        flow_requires_payment: bool = True,
        wizard: Optional[FormWizard] = None,
    ):
        self.api = api
        self.pending = PendingResultHolder(storage)
        self.store = SessionStore(api, storage, pending=self.pending)
        self.gate = PaywallGate(self.store, flow_requires_payment=flow_requires_payment)
        self.orchestrator = UnlockOrchestrator(
            self.store,
            self.pending,
            api,
            flow_requires_payment=flow_requires_payment,
            on_reveal=self._on_unlocked,
        )
        self.wizard = wizard or FormWizard()

        self.result: Optional[Dict[str, Any]] = None
        self.preview: Optional[Dict[str, Any]] = None
        self.analysis_id: Optional[str] = None

        self.analyze_action = AsyncAction("analyze")
        self.auth_action = AsyncAction("auth")
        self.payment_action = AsyncAction("payment")

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "AnalysisFlow":
        return cls(BackendClient.from_config(config), config.make_storage(), **kwargs)

    async def aclose(self) -> None:
        self.orchestrator.close()
        await self.api.aclose()

    @property
    def decision(self) -> EntitlementDecision:
        return self.gate.decision

    @property
    def is_preview(self) -> bool:
        return self.result is None and self.preview is not None

    async def start(self) -> None:
        """Page load: restore the session, then any pending preview."""
        await self.store.restore()
        await self.orchestrator.resume()

    async def _on_unlocked(self, payload: Dict[str, Any]) -> None:
        self.result = payload
        self.preview = None
        self.analysis_id = self.orchestrator.analysis_id
        self.gate.mark_unlocked()

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    async def submit(self) -> Optional[Dict[str, Any]]:
        """Run the analysis for the completed wizard. Returns the full result if granted."""
        return await self.analyze_action.run(self._submit)

    async def _submit(self) -> Optional[Dict[str, Any]]:
        if not self.wizard.is_complete:
            raise ValueError("Analysis form is incomplete")

        if self.gate.decision == EntitlementDecision.GRANTED:
            try:
                return await self._run_full()
            except SessionExpiredError:
                await self.store.expire()
                raise
            except UpgradeRequiredError:
                # Local credits were stale
                await self.store.refresh_profile()

        await self._run_preview()
        return None

    async def _run_full(self) -> Dict[str, Any]:
        form = self.wizard.form
        payload = await self.api.analyze(
            form.to_fields(),
            form.uploads(),
            preview=False,
            token=self.store.session.token,
        )
        self.result = payload.analysis
        self.preview = None
        self.analysis_id = payload.analysisId
        if payload.creditsRemaining is not None:
            await self.store.update_credits(payload.creditsRemaining)
        _logger.info("Full analysis received")
        return self.result

    async def _run_preview(self) -> None:
        form = self.wizard.form
        payload = await self.api.analyze(form.to_fields(), form.uploads(), preview=True)
        self.preview = payload.analysis
        self.result = None
        self.pending.store(payload.analysis, form.snapshot())
        self.gate.show()
        await self.orchestrator.begin()
        _logger.info(f"Preview stored; unlock state {self.orchestrator.state.value}")

    # -------------------------------------------------------------------------
    # Paywall actions
    # -------------------------------------------------------------------------

    async def login(self, email: str, password: str):
        return await self.auth_action.run(self.store.login, email, password)

    async def register(self, email: str, password: str, name: Optional[str] = None):
        return await self.auth_action.run(self.store.register, email, password, name)

    async def register_with_ghin(self, email: str, password: str, ghin_number: str, name: Optional[str] = None):
        """Register via GHIN and pre-fill the wizard basics from the handicap record."""
        outcome = await self.auth_action.run(
            self.store.register_with_external_identity, email, password, ghin_number, name
        )
        if outcome is None:
            return None

        session, external = outcome
        form = self.wizard.form
        form.name = form.name or f"{external.firstName} {external.lastName}".strip()
        form.handicap = form.handicap or str(external.handicapIndex)
        form.home_course = form.home_course or (external.club or "")
        return session

    async def logout(self) -> None:
        await self.store.logout()
        self.result = None
        self.preview = None
        self.analysis_id = None

    async def start_checkout(self, price_type: str) -> Optional[str]:
        """Returns the checkout URL to navigate to."""
        return await self.payment_action.run(self._start_checkout, price_type)

    async def _start_checkout(self, price_type: str) -> str:
        token = self.store.session.token
        if token is None:
            raise UpgradeRequiredError("Create an account to continue")
        try:
            return await self.api.create_checkout(token, price_type)
        except SessionExpiredError:
            await self.store.expire()
            raise

    async def redeem_code(self, code: str) -> bool:
        await self.payment_action.run(self.orchestrator.activate_code, code)
        return not self.payment_action.failed

    async def handle_redirect(self, url: str) -> bool:
        """Return from checkout (full page load with ?payment=success)."""
        return await self.orchestrator.handle_payment_redirect(url)

    async def retry_unlock(self) -> UnlockState:
        return await self.orchestrator.retry()

    def close_paywall(self) -> bool:
        return self.gate.close()
