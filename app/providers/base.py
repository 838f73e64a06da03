"""
Handicap service provider interface.
Abstract base class defines the contract for GHIN-style lookups used
to pre-fill signup and the analysis wizard.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class GolferRecord(BaseModel):
    """Golfer as known to the handicap service."""
    ghin_number: str
    first_name: str
    last_name: str
    handicap_index: float
    club: Optional[str] = None
    state: Optional[str] = None
    trend: Optional[str] = None  # "improving" | "steady" | "rising"
    last_revision: Optional[date] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ScoreRecord(BaseModel):
    """One posted score."""
    played_on: date
    course_name: str
    adjusted_gross_score: int
    differential: Optional[float] = None


class HandicapLookupError(Exception):
    """Lookup failed for a reason other than "not found"."""

    code = "handicap_lookup_failed"


class HandicapProvider(ABC):
    """
    Abstract base class for handicap service providers.

    Returns normalized records regardless of source.
    """

    @abstractmethod
    async def lookup(self, ghin_number: str) -> Optional[GolferRecord]:
        """
        Look up a golfer by GHIN number.

        Returns:
            GolferRecord, or None if the number is unknown

        Raises:
            HandicapLookupError: If the service could not be reached
        """
        pass

    @abstractmethod
    async def recent_scores(self, ghin_number: str, limit: int = 20) -> List[ScoreRecord]:
        """Most recent posted scores, newest first."""
        pass

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Provider identifier (e.g., 'mock')."""
        pass
