"""
Analyzer factory.
"""

from typing import Optional

from app.analysis.base import ScorecardAnalyzer
from app.analysis.config import get_analyzer_provider
from app.analysis.mock import MockAnalyzer
from app.analysis.openai_analyzer import OpenAIAnalyzer


class AnalyzerFactory:
    """
    Factory for creating analyzer instances.

    Usage:
        analyzer = AnalyzerFactory.get_analyzer("mock")
    """

    _analyzers = {
        "mock": MockAnalyzer,
        "openai": OpenAIAnalyzer,
    }

    @classmethod
    def get_analyzer(cls, source: Optional[str] = None, **kwargs) -> ScorecardAnalyzer:
        """
        Get an analyzer by source name (default: ANALYZER_PROVIDER).

        Raises:
            ValueError: If source is unknown
        """
        source = source or get_analyzer_provider()
        if source not in cls._analyzers:
            raise ValueError(
                f"Unknown analyzer: {source}. "
                f"Available: {list(cls._analyzers.keys())}"
            )
        return cls._analyzers[source](**kwargs)

    @classmethod
    def register_analyzer(cls, name: str, analyzer_class: type):
        """Register a new analyzer type."""
        cls._analyzers[name] = analyzer_class

    @classmethod
    def available_analyzers(cls) -> list:
        return list(cls._analyzers.keys())
