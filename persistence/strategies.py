# persistence/strategies.py
"""
Course strategy storage.

One row per generated pre-round plan; the plan body is stored as JSON.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)


def save_course_strategy(
    user_id: str,
    course_name: str,
    strategy: dict,
    tees: Optional[str] = None,
) -> str:
    """
    Save a course strategy for a user.

    Returns:
        Strategy ID for retrieval
    """
    init_db()

    strategy_id = str(uuid4())

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO course_strategies
            (id, user_id, course_name, tees, strategy_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                strategy_id,
                user_id,
                course_name,
                tees,
                json.dumps(strategy),
                datetime.utcnow().isoformat(),
            ),
        )

    _logger.debug(f"Saved course strategy {strategy_id} for user {user_id}")
    return strategy_id


def get_course_strategy(strategy_id: str, user_id: str) -> Optional[dict]:
    """Get one strategy, scoped to its owner."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM course_strategies WHERE id = ? AND user_id = ?",
            (strategy_id, user_id),
        ).fetchone()

    if row is None:
        return None
    return _row_to_dict(row)


def list_course_strategies(user_id: str, limit: int = 50) -> list[dict]:
    """A user's strategies, newest first, without the strategy body."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT id, user_id, course_name, tees, created_at FROM course_strategies
            WHERE user_id = ?
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()

    return [
        {
            "id": row["id"],
            "user_id": row["user_id"],
            "course_name": row["course_name"],
            "tees": row["tees"],
            "created_at": row["created_at"],
        }
        for row in rows
    ]


def _row_to_dict(row) -> dict:
    return {
        "id": row["id"],
        "user_id": row["user_id"],
        "course_name": row["course_name"],
        "tees": row["tees"],
        "strategy_json": json.loads(row["strategy_json"]),
        "created_at": row["created_at"],
    }
