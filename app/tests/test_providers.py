# app/tests/test_providers.py
"""Tests for handicap providers."""
import asyncio

import pytest

from app.providers import MockHandicapProvider, ProviderFactory


class TestMockHandicapProvider:
    def test_lookup_known_golfer(self):
        golfer = asyncio.run(MockHandicapProvider().lookup("1234567"))

        assert golfer.full_name == "Billy Casper"
        assert golfer.handicap_index == 14.2

    def test_lookup_strips_whitespace(self):
        golfer = asyncio.run(MockHandicapProvider().lookup(" 7654321 "))
        assert golfer.last_name == "Lopez"

    def test_lookup_unknown(self):
        assert asyncio.run(MockHandicapProvider().lookup("0000000")) is None

    def test_recent_scores_newest_first(self):
        scores = asyncio.run(MockHandicapProvider().recent_scores("1234567"))

        dates = [s.played_on for s in scores]
        assert dates == sorted(dates, reverse=True)
        assert scores[0].adjusted_gross_score == 86

    def test_recent_scores_limit(self):
        scores = asyncio.run(MockHandicapProvider().recent_scores("1234567", limit=1))
        assert len(scores) == 1

    def test_recent_scores_unknown(self):
        assert asyncio.run(MockHandicapProvider().recent_scores("0000000")) == []


class TestProviderFactory:
    def test_default_from_env(self):
        assert ProviderFactory.get_handicap_provider().source_name == "mock"

    def test_kwargs_passed_through(self):
        provider = ProviderFactory.get_handicap_provider("mock", latency_ms=5)
        assert provider.latency_ms == 5

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown handicap provider"):
            ProviderFactory.get_handicap_provider("nope")

    def test_register_provider(self):
        class Custom(MockHandicapProvider):
            @property
            def source_name(self) -> str:
                return "custom"

        ProviderFactory.register_handicap_provider("custom", Custom)
        try:
            assert ProviderFactory.get_handicap_provider("custom").source_name == "custom"
            assert "custom" in ProviderFactory.available_handicap_providers()
        finally:
            ProviderFactory._handicap_providers.pop("custom")
