# app/analysis/models.py
"""
Golfer input and strategy output models, for scorecard analyses and
pre-round course strategies.

The strategy output is validated loosely: the required summary block
must be present and well-typed, the rest passes through as produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MissPattern(str, Enum):
    """Typical ball-flight miss."""
    SLICE = "slice"
    HOOK = "hook"
    BOTH = "both"
    STRAIGHT_SHORT = "straight_short"


MISS_DESCRIPTIONS = {
    MissPattern.SLICE: "Slice / fade that runs away (curves right for a right-handed golfer)",
    MissPattern.HOOK: "Hook / draw that turns over (curves left for a right-handed golfer)",
    MissPattern.BOTH: "Two-way miss, could go either direction",
    MissPattern.STRAIGHT_SHORT: "Straight but short, contact issues rather than curve",
}


class Strength(str, Enum):
    DRIVING = "driving"
    IRONS = "irons"
    SHORT_GAME = "shortgame"
    PUTTING = "putting"
    COURSE_MANAGEMENT = "course_mgmt"
    CONSISTENCY = "consistency"


MAX_SCORECARDS = 10


@dataclass
class ScorecardImage:
    """An uploaded scorecard photo."""
    content_type: str
    data: bytes
    filename: Optional[str] = None


class GolferProfile(BaseModel):
    """What the golfer told us in the wizard."""

    name: str = Field(min_length=1, max_length=100)
    handicap: float = Field(ge=-10, le=54)
    home_course: str = Field(min_length=1, max_length=200)
    miss_pattern: MissPattern
    miss_description: str = ""
    strengths: List[Strength] = Field(default_factory=list)

    @field_validator("name", "home_course")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class AnalysisSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    currentHandicap: float
    targetHandicap: float
    potentialStrokeDrop: float
    keyInsight: str


class StrategyAnalysis(BaseModel):
    """Full analysis as stored and returned to clients."""

    model_config = ConfigDict(extra="allow")

    summary: AnalysisSummary
    troubleHoles: list = Field(default_factory=list)
    strengthHoles: list = Field(default_factory=list)
    courseStrategy: dict = Field(default_factory=dict)
    practicePlan: dict = Field(default_factory=dict)
    mentalGame: dict = Field(default_factory=dict)
    targetStats: dict = Field(default_factory=dict)
    thirtyDayPlan: list = Field(default_factory=list)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


# =============================================================================
# Course strategy
# =============================================================================

class CourseRequest(BaseModel):
    """A course the golfer is about to play."""

    course_name: str = Field(min_length=1, max_length=200)
    tees: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=2000)
    handicap: float = Field(default=15.0, ge=-10, le=54)
    miss_pattern: MissPattern = MissPattern.SLICE

    @field_validator("course_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class KeyHole(BaseModel):
    model_config = ConfigDict(extra="allow")

    number: int = Field(ge=1, le=36)
    par: Optional[int] = None
    yardage: Optional[Union[str, int]] = None
    strategy: str
    danger: Optional[str] = None


class ScoringTargets(BaseModel):
    great: int
    solid: int
    max: int


class CourseStrategy(BaseModel):
    """Pre-round plan for one course, as stored and returned to clients."""

    model_config = ConfigDict(extra="allow")

    courseName: str
    tees: Optional[str] = None
    overview: str
    keyHoles: List[KeyHole] = Field(default_factory=list)
    generalStrategy: list = Field(default_factory=list)
    scoringTargets: ScoringTargets
    preRoundChecklist: List[str] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
