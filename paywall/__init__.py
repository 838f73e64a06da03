"""
Client core for sessions, the paywall and unlocking previews.

Example:
    from paywall import AnalysisFlow, ClientConfig

    flow = AnalysisFlow.from_config(ClientConfig.from_env())
    await flow.start()
"""

from paywall.actions import AsyncAction
from paywall.api import BackendClient
from paywall.config import ClientConfig
from paywall.errors import (
    ApiError,
    AuthError,
    CodeError,
    CommitError,
    MalformedResponseError,
    NetworkError,
    PaymentError,
    PaywallError,
    SessionExpiredError,
    UpgradeRequiredError,
)
from paywall.flow import AnalysisFlow
from paywall.gate import PaywallGate, decide
from paywall.models import (
    EntitlementDecision,
    PendingResult,
    Profile,
    Session,
    SessionChange,
    SubscriptionTier,
)
from paywall.pending import PendingResultHolder
from paywall.session import SessionStore
from paywall.storage import JsonFileStorage, MemoryStorage, Storage
from paywall.unlock import UnlockOrchestrator, UnlockState
from paywall.wizard import AnalysisForm, FormWizard, Scorecard, WizardStep

__all__ = [
    "AnalysisFlow",
    "AsyncAction",
    "BackendClient",
    "ClientConfig",
    "decide",
    "PaywallGate",
    "PendingResultHolder",
    "SessionStore",
    "UnlockOrchestrator",
    "UnlockState",
    "FormWizard",
    "AnalysisForm",
    "Scorecard",
    "WizardStep",
    # Models
    "EntitlementDecision",
    "PendingResult",
    "Profile",
    "Session",
    "SessionChange",
    "SubscriptionTier",
    # Storage
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    # Errors
    "PaywallError",
    "ApiError",
    "AuthError",
    "CodeError",
    "CommitError",
    "MalformedResponseError",
    "NetworkError",
    "PaymentError",
    "SessionExpiredError",
    "UpgradeRequiredError",
]
