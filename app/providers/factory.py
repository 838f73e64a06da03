"""
Provider factory for handicap lookups.
"""

import os

from app.providers.base import HandicapProvider
from app.providers.mock import MockHandicapProvider


class ProviderFactory:
    """
    Factory for creating handicap provider instances.

    Usage:
        provider = ProviderFactory.get_handicap_provider("mock")
    """

    _handicap_providers = {
        "mock": MockHandicapProvider,
    }

    @classmethod
    def get_handicap_provider(cls, source: str = "", **kwargs) -> HandicapProvider:
        """
        Get a handicap provider by source name (default: HANDICAP_PROVIDER or "mock").

        Raises:
            ValueError: If source is unknown
        """
        source = source or os.environ.get("HANDICAP_PROVIDER", "mock")
        if source not in cls._handicap_providers:
            raise ValueError(
                f"Unknown handicap provider: {source}. "
                f"Available: {list(cls._handicap_providers.keys())}"
            )

        provider_class = cls._handicap_providers[source]
        return provider_class(**kwargs)

    @classmethod
    def register_handicap_provider(cls, name: str, provider_class: type):
        """Register a new handicap provider type."""
        cls._handicap_providers[name] = provider_class

    @classmethod
    def available_handicap_providers(cls) -> list:
        return list(cls._handicap_providers.keys())
