"""
Scorecard analysis.

Turns a golfer profile and scorecard photos into a practice and
course strategy. The analyzer is chosen by ANALYZER_PROVIDER.

Example:
    from app.analysis import AnalyzerFactory, GolferProfile

    analyzer = AnalyzerFactory.get_analyzer("mock")
    strategy = await analyzer.analyze(profile, scorecards=[])
"""

from app.analysis.base import AnalysisError, ScorecardAnalyzer
from app.analysis.factory import AnalyzerFactory
from app.analysis.models import (
    CourseRequest,
    CourseStrategy,
    GolferProfile,
    MissPattern,
    ScorecardImage,
    Strength,
    StrategyAnalysis,
)

__all__ = [
    "AnalysisError",
    "ScorecardAnalyzer",
    "AnalyzerFactory",
    "CourseRequest",
    "CourseStrategy",
    "GolferProfile",
    "MissPattern",
    "ScorecardImage",
    "Strength",
    "StrategyAnalysis",
]
