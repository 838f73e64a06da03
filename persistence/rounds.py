# persistence/rounds.py
"""
Round tracking storage and per-user scoring stats.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)


def save_round(
    user_id: str,
    course_name: str,
    score: int,
    played_on: Optional[str] = None,
    analysis_id: Optional[str] = None,
    putts: Optional[int] = None,
    fairways_hit: Optional[int] = None,
    greens_in_regulation: Optional[int] = None,
    penalties: Optional[int] = None,
    notes: Optional[str] = None,
) -> str:
    """
    Log a played round.

    Args:
        user_id: Owner of the round
        course_name: Course played
        score: Gross score
        played_on: ISO date (default: today)
        analysis_id: Strategy the round was played against, if any

    Returns:
        Round ID
    """
    init_db()

    round_id = str(uuid4())
    played_on = played_on or date.today().isoformat()

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO rounds
            (id, user_id, analysis_id, course_name, played_on, score, putts,
             fairways_hit, greens_in_regulation, penalties, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                round_id,
                user_id,
                analysis_id,
                course_name,
                played_on,
                score,
                putts,
                fairways_hit,
                greens_in_regulation,
                penalties,
                notes,
                datetime.utcnow().isoformat(),
            ),
        )

    _logger.debug(f"Saved round {round_id} for user {user_id}")
    return round_id


def list_rounds(user_id: str, limit: int = 100) -> list[dict]:
    """List a user's rounds, most recently played first."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM rounds
            WHERE user_id = ?
            ORDER BY played_on DESC, created_at DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()

    return [dict(row) for row in rows]


def get_user_stats(user_id: str) -> dict:
    """
    Aggregate scoring stats over all of a user's rounds.

    Returns zeroed/None values for a user with no rounds.
    """
    init_db()

    with get_db() as conn:
        row = conn.execute(
            """
            SELECT
                COUNT(*) AS rounds_played,
                AVG(score) AS average_score,
                MIN(score) AS best_score,
                AVG(putts) AS average_putts,
                AVG(penalties) AS average_penalties
            FROM rounds
            WHERE user_id = ?
            """,
            (user_id,),
        ).fetchone()

        recent = conn.execute(
            """
            SELECT score FROM rounds
            WHERE user_id = ?
            ORDER BY played_on DESC, created_at DESC
            LIMIT 5
            """,
            (user_id,),
        ).fetchall()

    average = row["average_score"]
    return {
        "rounds_played": row["rounds_played"],
        "average_score": round(average, 1) if average is not None else None,
        "best_score": row["best_score"],
        "average_putts": round(row["average_putts"], 1) if row["average_putts"] is not None else None,
        "average_penalties": (
            round(row["average_penalties"], 1) if row["average_penalties"] is not None else None
        ),
        "recent_scores": [r["score"] for r in recent],
    }
