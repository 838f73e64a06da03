# auth/models.py
"""
User account model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union
import uuid

SUBSCRIPTION_FREE = "free"
SUBSCRIPTION_PRO = "pro"

# Credits granted to every new account (one free full analysis)
SIGNUP_CREDITS = 1

UNLIMITED = "unlimited"


@dataclass
class User:
    """
    User account model.

    Attributes:
        id: Unique user ID (UUID)
        email: User's email (unique, used for login)
        password_hash: Bcrypt-hashed password
        name: Display name
        handicap: Handicap index (from the user or a GHIN lookup)
        home_course: Home course name
        ghin_number: Linked GHIN number, if any
        credits: Remaining single-analysis credits
        subscription_status: "free" or "pro"
        subscription_id: Active Stripe subscription ID
        stripe_customer_id: Stripe customer ID (for the billing portal)
    """
    id: str
    email: str
    password_hash: str
    name: Optional[str] = None
    handicap: Optional[float] = None
    home_course: Optional[str] = None
    ghin_number: Optional[str] = None
    credits: int = SIGNUP_CREDITS
    subscription_status: str = SUBSCRIPTION_FREE
    subscription_id: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def new(
        cls,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        handicap: Optional[float] = None,
        ghin_number: Optional[str] = None,
    ) -> User:
        """Create a new user with generated ID and signup credits."""
        now = datetime.utcnow()
        return cls(
            id=str(uuid.uuid4()),
            email=email.lower().strip(),
            password_hash=password_hash,
            name=name.strip() if name else None,
            handicap=handicap,
            ghin_number=ghin_number,
            credits=SIGNUP_CREDITS,
            subscription_status=SUBSCRIPTION_FREE,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_pro(self) -> bool:
        return self.subscription_status == SUBSCRIPTION_PRO

    @property
    def can_analyze(self) -> bool:
        """Pro subscribers always can; free users need a credit."""
        return self.is_pro or self.credits > 0

    @property
    def credits_display(self) -> Union[int, str]:
        """Credits as reported to clients ("unlimited" for pro)."""
        return UNLIMITED if self.is_pro else self.credits

    def to_dict(self) -> dict:
        """Convert to the profile dict sent to clients (no password hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "handicap": self.handicap,
            "homeCourse": self.home_course,
            "ghinNumber": self.ghin_number,
            "credits": self.credits_display,
            "subscriptionStatus": self.subscription_status,
        }
