# persistence/analyses.py
"""
Saved analysis storage.

An analysis is only written here once it has been paid for: either a full
analysis run by an entitled user, or a preview committed after signup.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)


def save_analysis(
    user_id: str,
    name: str,
    analysis: dict,
    handicap: Optional[float] = None,
    home_course: Optional[str] = None,
    miss_pattern: Optional[str] = None,
) -> str:
    """
    Save an analysis for a user.

    Args:
        user_id: Owner of the analysis
        name: Golfer name the analysis was produced for
        analysis: Full analysis result dict
        handicap: Handicap index echoed from the form
        home_course: Home course echoed from the form
        miss_pattern: Typical miss echoed from the form

    Returns:
        Analysis ID for retrieval
    """
    init_db()

    analysis_id = str(uuid4())

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO analyses
            (id, user_id, name, handicap, home_course, miss_pattern, analysis_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                analysis_id,
                user_id,
                name,
                handicap,
                home_course,
                miss_pattern,
                json.dumps(analysis),
                datetime.utcnow().isoformat(),
            ),
        )

    _logger.debug(f"Saved analysis {analysis_id} for user {user_id}")
    return analysis_id


def get_analysis(analysis_id: str, user_id: str) -> Optional[dict]:
    """Get one analysis, scoped to its owner. None if missing or not theirs."""
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM analyses WHERE id = ? AND user_id = ?",
            (analysis_id, user_id),
        ).fetchone()

    if row is None:
        return None

    return _row_to_dict(row)


def list_analyses(user_id: str, limit: int = 50) -> list[dict]:
    """List a user's analyses, newest first, without the full analysis body."""
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM analyses
            WHERE user_id = ?
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()

    summaries = []
    for row in rows:
        item = _row_to_dict(row)
        item.pop("analysis_json")
        summaries.append(item)
    return summaries


def count_analyses(user_id: str) -> int:
    init_db()

    with get_db() as conn:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM analyses WHERE user_id = ?",
            (user_id,),
        ).fetchone()

    return row["n"]


def _row_to_dict(row) -> dict:
    return {
        "id": row["id"],
        "user_id": row["user_id"],
        "name": row["name"],
        "handicap": row["handicap"],
        "home_course": row["home_course"],
        "miss_pattern": row["miss_pattern"],
        "analysis_json": json.loads(row["analysis_json"]),
        "created_at": row["created_at"],
    }
