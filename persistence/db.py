# persistence/db.py
"""
SQLite database connection and schema management.

Uses a file-based SQLite database for users, saved analyses, rounds
and course strategies.
Point FAIRWAY_DB_PATH at a persistent volume in production.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

_logger = logging.getLogger(__name__)

# Database file location (configurable via env var)
DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "fairway.db"
DB_PATH = Path(os.environ.get("FAIRWAY_DB_PATH", str(DEFAULT_DB_PATH)))

# Connection pool (one connection per thread)
_local = threading.local()
_init_lock = threading.Lock()
_initialized = False


def _get_connection() -> sqlite3.Connection:
    """Get thread-local database connection for the current DB_PATH."""
    conn = getattr(_local, "connection", None)
    if conn is not None and getattr(_local, "path", None) != str(DB_PATH):
        # DB_PATH was repointed (tests do this); drop the stale connection
        conn.close()
        conn = None

    if conn is None:
        if str(DB_PATH) != ":memory:":
            DB_PATH.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(DB_PATH),
            timeout=30.0,
            check_same_thread=False,
        )
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row
        _local.connection = conn
        _local.path = str(DB_PATH)

    return conn


@contextmanager
def get_db():
    """
    Get database connection context manager.

    Usage:
        with get_db() as conn:
            cursor = conn.execute("SELECT ...")
    """
    conn = _get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_db() -> None:
    """
    Initialize database schema.

    Creates tables if they don't exist.
    Safe to call multiple times (idempotent).
    """
    global _initialized

    with _init_lock:
        if _initialized:
            return

        with get_db() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    name TEXT,
                    handicap REAL,
                    home_course TEXT,
                    ghin_number TEXT,
                    credits INTEGER NOT NULL DEFAULT 1,
                    subscription_status TEXT NOT NULL DEFAULT 'free',
                    subscription_id TEXT,
                    stripe_customer_id TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_users_subscription
                ON users(subscription_id)
            """)

            # Saved (committed) analyses
            conn.execute("""
                CREATE TABLE IF NOT EXISTS analyses (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    handicap REAL,
                    home_course TEXT,
                    miss_pattern TEXT,
                    analysis_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_analyses_user
                ON analyses(user_id, created_at DESC)
            """)

            # Logged rounds
            conn.execute("""
                CREATE TABLE IF NOT EXISTS rounds (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    analysis_id TEXT,
                    course_name TEXT NOT NULL,
                    played_on TEXT NOT NULL,
                    score INTEGER NOT NULL,
                    putts INTEGER,
                    fairways_hit INTEGER,
                    greens_in_regulation INTEGER,
                    penalties INTEGER,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_rounds_user
                ON rounds(user_id, played_on DESC)
            """)

            # Pre-round course strategies
            conn.execute("""
                CREATE TABLE IF NOT EXISTS course_strategies (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    course_name TEXT NOT NULL,
                    tees TEXT,
                    strategy_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_course_strategies_user
                ON course_strategies(user_id, created_at DESC)
            """)

            _logger.info(f"Database initialized at {DB_PATH}")
            _initialized = True


def close_db() -> None:
    """Close thread-local database connection."""
    if getattr(_local, "connection", None) is not None:
        _local.connection.close()
        _local.connection = None
        _local.path = None


def reset_db() -> None:
    """Reset database (for testing). Drops all tables."""
    global _initialized

    with _init_lock:
        with get_db() as conn:
            conn.execute("DROP TABLE IF EXISTS course_strategies")
            conn.execute("DROP TABLE IF EXISTS rounds")
            conn.execute("DROP TABLE IF EXISTS analyses")
            conn.execute("DROP TABLE IF EXISTS users")
        _initialized = False


def get_db_path() -> Path:
    """Get the database file path."""
    return DB_PATH
