"""
Handicap service providers.

This module abstracts the handicap service behind a common interface.
Providers can be swapped without changing consumer code.

Example:
    from app.providers import ProviderFactory

    provider = ProviderFactory.get_handicap_provider("mock")
    golfer = await provider.lookup("1234567")
"""

from app.providers.base import (
    HandicapProvider,
    HandicapLookupError,
    GolferRecord,
    ScoreRecord,
)

from app.providers.mock import MockHandicapProvider

from app.providers.factory import ProviderFactory

__all__ = [
    # Base classes
    "HandicapProvider",
    "HandicapLookupError",
    # Models
    "GolferRecord",
    "ScoreRecord",
    # Implementations
    "MockHandicapProvider",
    # Factory
    "ProviderFactory",
]
