"""
Persistence layer.

Provides SQLite-backed storage for:
- User accounts (schema only; queries live in auth.service)
- Saved analyses
- Logged rounds and scoring stats
- Course strategies
"""

from persistence.db import get_db, init_db, close_db
from persistence.analyses import save_analysis, get_analysis, list_analyses
from persistence.rounds import save_round, list_rounds, get_user_stats
from persistence.strategies import (
    save_course_strategy,
    get_course_strategy,
    list_course_strategies,
)

__all__ = [
    "get_db",
    "init_db",
    "close_db",
    "save_analysis",
    "get_analysis",
    "list_analyses",
    "save_round",
    "list_rounds",
    "get_user_stats",
    "save_course_strategy",
    "get_course_strategy",
    "list_course_strategies",
]
