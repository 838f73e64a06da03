"""
Analyzer interface.
All analyzers turn a golfer profile plus scorecard photos into a
validated StrategyAnalysis, and a course request into a CourseStrategy.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.analysis.models import (
    CourseRequest,
    CourseStrategy,
    GolferProfile,
    ScorecardImage,
    StrategyAnalysis,
)


class AnalysisError(Exception):
    """Analysis could not be produced."""

    code = "analysis_failed"


class ScorecardAnalyzer(ABC):
    """
    Abstract base class for strategy analyzers.

    Implementations must return a StrategyAnalysis regardless of source.
    """

    @abstractmethod
    async def analyze(
        self, profile: GolferProfile, scorecards: List[ScorecardImage]
    ) -> StrategyAnalysis:
        """
        Produce a strategy for a golfer.

        Raises:
            AnalysisError: If the analysis cannot be produced
        """
        pass

    @abstractmethod
    async def plan_course(
        self, request: CourseRequest, scorecard: Optional[ScorecardImage] = None
    ) -> CourseStrategy:
        """
        Produce a pre-round strategy for one course.

        Raises:
            AnalysisError: If the strategy cannot be produced
        """
        pass

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Analyzer identifier (e.g., 'mock', 'openai')."""
        pass
