# paywall/schemas.py
"""
Wire models for backend responses.

Every JSON body is validated here before it reaches the session store;
a body that fails validation becomes MalformedResponseError in the API
client.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from paywall.models import Profile, SubscriptionTier

WireCredits = Union[NonNegativeInt, Literal["unlimited"]]


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ProfilePayload(_Wire):
    id: str
    email: str
    credits: WireCredits = 0
    subscriptionStatus: SubscriptionTier = SubscriptionTier.FREE
    name: Optional[str] = None
    handicap: Optional[float] = None
    homeCourse: Optional[str] = None
    ghinNumber: Optional[str] = None

    def to_profile(self) -> Profile:
        return Profile(
            user_id=self.id,
            email=self.email,
            credits=self.credits,
            subscription_tier=self.subscriptionStatus,
            name=self.name,
            handicap=self.handicap,
            home_course=self.homeCourse,
            ghin_number=self.ghinNumber,
        )


class AuthPayload(_Wire):
    token: str = Field(min_length=1)
    user: ProfilePayload


class ExternalProfile(_Wire):
    """Handicap-service record returned by GHIN signup, used to pre-fill the wizard."""
    ghinNumber: str
    firstName: str
    lastName: str
    handicapIndex: float
    club: Optional[str] = None
    state: Optional[str] = None
    recentScores: List[Dict[str, Any]] = Field(default_factory=list)


class ExternalAuthPayload(AuthPayload):
    ghin: ExternalProfile


class ProfileUpdatePayload(_Wire):
    user: ProfilePayload


class CheckoutPayload(_Wire):
    url: str = Field(min_length=1)
    sessionId: Optional[str] = None


class PaymentStatusPayload(_Wire):
    subscriptionStatus: SubscriptionTier
    credits: WireCredits
    canAnalyze: bool


class AnalyzePayload(_Wire):
    analysis: Dict[str, Any]
    preview: bool = False
    analysisId: Optional[str] = None
    creditsRemaining: Optional[WireCredits] = None


class SavePayload(_Wire):
    analysisId: str
    creditsRemaining: WireCredits


class ErrorPayload(_Wire):
    error: str = ""
    code: str = ""
    needsUpgrade: bool = False
