# paywall/models.py
"""
Client-side session and paywall domain objects.

A Session is immutable; the SessionStore swaps whole sessions so that
listeners can compare previous and current.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

UNLIMITED = "unlimited"

Credits = Union[int, str]


class SubscriptionTier(str, Enum):
    FREE = "free"
    PRO = "pro"


class EntitlementDecision(str, Enum):
    """What the paywall lets the user see."""
    DENIED = "denied"
    PREVIEW_ONLY = "preview_only"
    GRANTED = "granted"


@dataclass(frozen=True)
class Profile:
    """Account state the paywall decides on, plus display fields."""
    user_id: str
    email: str
    credits: Credits = 0
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    name: Optional[str] = None
    handicap: Optional[float] = None
    home_course: Optional[str] = None
    ghin_number: Optional[str] = None

    @property
    def is_pro(self) -> bool:
        return self.subscription_tier == SubscriptionTier.PRO

    @property
    def has_credit(self) -> bool:
        if self.credits == UNLIMITED:
            return True
        return isinstance(self.credits, int) and self.credits > 0

    @property
    def is_entitled(self) -> bool:
        return self.is_pro or self.has_credit

    def with_credits(self, credits: Credits) -> "Profile":
        return replace(self, credits=credits)


@dataclass(frozen=True)
class Anonymous:
    pass


@dataclass(frozen=True)
class Authenticated:
    user_id: str
    token: str
    profile: Profile


ANONYMOUS = Anonymous()

Identity = Union[Anonymous, Authenticated]


@dataclass(frozen=True)
class Session:
    """
    Current identity. The token lives inside Authenticated, so a token
    exists exactly when the session is authenticated.
    """
    identity: Identity = ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.identity, Authenticated)

    @property
    def token(self) -> Optional[str]:
        return self.identity.token if self.is_authenticated else None

    @property
    def profile(self) -> Optional[Profile]:
        return self.identity.profile if self.is_authenticated else None

    @property
    def user_id(self) -> Optional[str]:
        return self.identity.user_id if self.is_authenticated else None

    @classmethod
    def authenticated(cls, token: str, profile: Profile) -> "Session":
        return cls(Authenticated(user_id=profile.user_id, token=token, profile=profile))


@dataclass(frozen=True)
class SessionChange:
    """Delivered to session listeners after every change."""
    previous: Session
    current: Session

    @property
    def became_authenticated(self) -> bool:
        return not self.previous.is_authenticated and self.current.is_authenticated

    @property
    def became_anonymous(self) -> bool:
        return self.previous.is_authenticated and not self.current.is_authenticated


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PendingResult:
    """A preview analysis waiting to be committed after signup/payment."""
    payload: Dict[str, Any]
    form_snapshot: Dict[str, Any]
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {
            "payload": self.payload,
            "formSnapshot": self.form_snapshot,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingResult":
        """
        Rebuild from durable storage.

        Raises:
            ValueError: If the stored value is not a pending result
        """
        if not isinstance(data, dict) or not isinstance(data.get("payload"), dict):
            raise ValueError("Stored pending result has no payload")
        snapshot = data.get("formSnapshot") or {}
        if not isinstance(snapshot, dict):
            raise ValueError("Stored pending result has an invalid form snapshot")
        created = data.get("createdAt")
        if created is not None and not isinstance(created, str):
            raise ValueError("Stored pending result has an invalid timestamp")
        return cls(
            payload=data["payload"],
            form_snapshot=snapshot,
            created_at=datetime.fromisoformat(created) if created else _utcnow(),
        )
