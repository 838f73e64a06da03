"""
Mock handicap provider for development and testing.
Serves a small fixed roster with simulated latency.
"""

import asyncio
from datetime import date
from typing import Dict, List, Optional

from app.providers.base import GolferRecord, HandicapProvider, ScoreRecord

MOCK_GOLFERS: Dict[str, GolferRecord] = {
    "1234567": GolferRecord(
        ghin_number="1234567",
        first_name="Billy",
        last_name="Casper",
        handicap_index=14.2,
        club="Pebble Creek GC",
        state="CA",
        trend="improving",
        last_revision=date(2026, 9, 1),
    ),
    "7654321": GolferRecord(
        ghin_number="7654321",
        first_name="Nancy",
        last_name="Lopez",
        handicap_index=3.8,
        club="Desert Pines CC",
        state="AZ",
        trend="steady",
        last_revision=date(2026, 9, 15),
    ),
}

MOCK_SCORES: Dict[str, List[ScoreRecord]] = {
    "1234567": [
        ScoreRecord(played_on=date(2026, 9, 20), course_name="Pebble Creek GC", adjusted_gross_score=86, differential=13.1),
        ScoreRecord(played_on=date(2026, 9, 13), course_name="Pebble Creek GC", adjusted_gross_score=89, differential=15.9),
        ScoreRecord(played_on=date(2026, 9, 6), course_name="Oak Hollow", adjusted_gross_score=91, differential=16.4),
    ],
    "7654321": [
        ScoreRecord(played_on=date(2026, 9, 21), course_name="Desert Pines CC", adjusted_gross_score=75, differential=3.2),
    ],
}


class MockHandicapProvider(HandicapProvider):
    """Mock provider using in-memory data."""

    def __init__(self, latency_ms: int = 0):
        self.latency_ms = latency_ms

    @property
    def source_name(self) -> str:
        return "mock"

    async def lookup(self, ghin_number: str) -> Optional[GolferRecord]:
        await asyncio.sleep(self.latency_ms / 1000)
        return MOCK_GOLFERS.get(ghin_number.strip())

    async def recent_scores(self, ghin_number: str, limit: int = 20) -> List[ScoreRecord]:
        await asyncio.sleep(self.latency_ms / 1000)
        scores = MOCK_SCORES.get(ghin_number.strip(), [])
        return sorted(scores, key=lambda s: s.played_on, reverse=True)[:limit]
