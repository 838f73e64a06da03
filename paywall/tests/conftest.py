"""Fixtures for the client core tests."""
import asyncio

import pytest

from paywall.errors import AuthError, CodeError, SessionExpiredError
from paywall.models import SubscriptionTier
from paywall.pending import PendingResultHolder
from paywall.schemas import AuthPayload, ProfilePayload, SavePayload
from paywall.session import SessionStore
from paywall.storage import MemoryStorage
from paywall.unlock import UnlockOrchestrator

TRIAL_CODE = "GOLFBETA2026"

PREVIEW = {
    "summary": {
        "currentHandicap": 18.0,
        "targetHandicap": 14.4,
        "potentialStrokeDrop": 3.6,
        "keyInsight": "Keep the slice in play",
    }
}

SNAPSHOT = {"name": "Pat", "handicap": 18.0, "homeCourse": "Oak Hollow", "missPattern": "slice"}


class FakeBackend:
    """In-memory stand-in for BackendClient with the same coroutine methods."""

    def __init__(self):
        self.profiles = {}
        self.save_calls = []
        self.profile_calls = 0
        self.save_error = None

    def add_user(self, token, credits=1, tier=SubscriptionTier.FREE, email=None):
        user_id = f"user-{len(self.profiles) + 1}"
        self.profiles[token] = ProfilePayload(
            id=user_id,
            email=email or f"{user_id}@example.com",
            credits=credits,
            subscriptionStatus=tier,
        )
        return self.profiles[token]

    def _profile(self, token):
        if token not in self.profiles:
            raise SessionExpiredError("Invalid or expired token", code="invalid_token", status_code=401)
        return self.profiles[token]

    async def login(self, email, password):
        for token, profile in self.profiles.items():
            if profile.email == email:
                return AuthPayload(token=token, user=profile)
        raise AuthError("Invalid credentials", code="invalid_credentials", status_code=401)

    async def register(self, email, password, name=None):
        token = f"token-{len(self.profiles) + 1}"
        return AuthPayload(token=token, user=self.add_user(token, email=email))

    async def get_profile(self, token):
        self.profile_calls += 1
        await asyncio.sleep(0)
        return self._profile(token)

    async def update_profile(self, token, **fields):
        profile = self._profile(token)
        self.profiles[token] = profile.model_copy(update=fields)
        return self.profiles[token]

    async def activate_trial(self, token, code):
        profile = self._profile(token)
        if code.strip().upper() != TRIAL_CODE:
            raise CodeError("Invalid trial code", status_code=400)
        self.profiles[token] = profile.model_copy(
            update={"subscriptionStatus": SubscriptionTier.PRO, "credits": "unlimited"}
        )

    async def save_analysis(self, token, pending):
        self.save_calls.append((token, pending))
        # Let concurrently scheduled notifications run before answering
        await asyncio.sleep(0)
        if self.save_error is not None:
            raise self.save_error

        profile = self._profile(token)
        if profile.subscriptionStatus == SubscriptionTier.PRO:
            remaining = "unlimited"
        else:
            remaining = max(profile.credits - 1, 0)
            self.profiles[token] = profile.model_copy(update={"credits": remaining})
        return SavePayload(analysisId=f"analysis-{len(self.save_calls)}", creditsRemaining=remaining)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def pending(storage):
    return PendingResultHolder(storage)


@pytest.fixture
def store(backend, storage, pending):
    return SessionStore(backend, storage, pending=pending)


@pytest.fixture
def orchestrator(store, pending, backend):
    return UnlockOrchestrator(store, pending, backend)


@pytest.fixture
def preview():
    return dict(PREVIEW)


@pytest.fixture
def snapshot():
    return dict(SNAPSHOT)
