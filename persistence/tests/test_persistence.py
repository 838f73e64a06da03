# persistence/tests/test_persistence.py
"""Tests for persistence layer."""

import sqlite3

import pytest

from persistence.db import get_db, get_db_path, init_db, reset_db
from persistence.analyses import count_analyses, get_analysis, list_analyses, save_analysis
from persistence.rounds import get_user_stats, list_rounds, save_round
from persistence.strategies import get_course_strategy, list_course_strategies, save_course_strategy


SAMPLE_ANALYSIS = {
    "summary": {
        "currentHandicap": 14.2,
        "targetHandicap": 11.4,
        "potentialStrokeDrop": 2.8,
        "keyInsight": "Keep the slice in play.",
    },
    "troubleHoles": [],
}


@pytest.fixture
def user_id():
    from auth.service import create_user
    return create_user("golfer@example.com", "Password123").id


@pytest.fixture
def other_user_id():
    from auth.service import create_user
    return create_user("other@example.com", "Password123").id


class TestDatabase:
    def test_init_creates_tables(self):
        init_db()
        with get_db() as conn:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            }
        assert {"users", "analyses", "rounds", "course_strategies"} <= tables

    def test_init_is_idempotent(self):
        init_db()
        init_db()

    def test_db_path_is_test_file(self, tmp_path):
        assert get_db_path() == tmp_path / "fairway.db"

    def test_reset_drops_tables(self, user_id):
        reset_db()
        with get_db() as conn:
            tables = list(conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'"))
        assert tables == []

    def test_get_db_rolls_back_on_error(self, user_id):
        with pytest.raises(sqlite3.IntegrityError):
            with get_db() as conn:
                conn.execute("UPDATE users SET credits = 50 WHERE id = ?", (user_id,))
                conn.execute("INSERT INTO users (id) VALUES (NULL)")

        with get_db() as conn:
            row = conn.execute("SELECT credits FROM users WHERE id = ?", (user_id,)).fetchone()
        assert row["credits"] == 1


class TestAnalyses:
    def test_save_and_get(self, user_id):
        analysis_id = save_analysis(
            user_id, "Billy", SAMPLE_ANALYSIS, handicap=14.2, home_course="Pebble Creek", miss_pattern="slice"
        )

        record = get_analysis(analysis_id, user_id)
        assert record["name"] == "Billy"
        assert record["home_course"] == "Pebble Creek"
        assert record["miss_pattern"] == "slice"
        assert record["analysis_json"] == SAMPLE_ANALYSIS

    def test_get_is_scoped_to_owner(self, user_id, other_user_id):
        analysis_id = save_analysis(user_id, "Billy", SAMPLE_ANALYSIS)
        assert get_analysis(analysis_id, other_user_id) is None
        assert get_analysis("missing", user_id) is None

    def test_list_omits_body(self, user_id, other_user_id):
        save_analysis(user_id, "First", SAMPLE_ANALYSIS)
        save_analysis(user_id, "Second", SAMPLE_ANALYSIS)
        save_analysis(other_user_id, "Theirs", SAMPLE_ANALYSIS)

        items = list_analyses(user_id)
        assert {item["name"] for item in items} == {"First", "Second"}
        assert all("analysis_json" not in item for item in items)
        assert count_analyses(user_id) == 2

    def test_requires_existing_user(self):
        with pytest.raises(sqlite3.IntegrityError):
            save_analysis("ghost", "Nobody", SAMPLE_ANALYSIS)


class TestRounds:
    def test_save_and_list(self, user_id):
        save_round(user_id, "Oak Hollow", 91, played_on="2026-09-01")
        save_round(user_id, "Pebble Creek", 86, played_on="2026-09-20", putts=31)

        rounds = list_rounds(user_id)
        assert [r["course_name"] for r in rounds] == ["Pebble Creek", "Oak Hollow"]
        assert rounds[0]["putts"] == 31

    def test_played_on_defaults_to_today(self, user_id):
        from datetime import date

        save_round(user_id, "Oak Hollow", 90)
        assert list_rounds(user_id)[0]["played_on"] == date.today().isoformat()

    def test_stats(self, user_id):
        save_round(user_id, "A", 90, played_on="2026-09-01", putts=34, penalties=2)
        save_round(user_id, "B", 85, played_on="2026-09-08", putts=30, penalties=1)
        save_round(user_id, "C", 88, played_on="2026-09-15")

        stats = get_user_stats(user_id)
        assert stats["rounds_played"] == 3
        assert stats["average_score"] == 87.7
        assert stats["best_score"] == 85
        assert stats["average_putts"] == 32.0
        assert stats["average_penalties"] == 1.5
        assert stats["recent_scores"] == [88, 85, 90]

    def test_stats_without_rounds(self, user_id):
        stats = get_user_stats(user_id)
        assert stats["rounds_played"] == 0
        assert stats["average_score"] is None
        assert stats["best_score"] is None
        assert stats["recent_scores"] == []


class TestCourseStrategies:
    STRATEGY = {"courseName": "Torrey Pines South", "overview": "Long and exposed."}

    def test_save_and_get(self, user_id):
        strategy_id = save_course_strategy(user_id, "Torrey Pines South", self.STRATEGY, tees="Blue")

        record = get_course_strategy(strategy_id, user_id)
        assert record["course_name"] == "Torrey Pines South"
        assert record["tees"] == "Blue"
        assert record["strategy_json"] == self.STRATEGY

    def test_get_is_scoped_to_owner(self, user_id, other_user_id):
        strategy_id = save_course_strategy(user_id, "Torrey Pines South", self.STRATEGY)
        assert get_course_strategy(strategy_id, other_user_id) is None

    def test_list_omits_body(self, user_id, other_user_id):
        save_course_strategy(user_id, "Torrey Pines South", self.STRATEGY)
        save_course_strategy(user_id, "Oak Hollow", self.STRATEGY, tees="White")
        save_course_strategy(other_user_id, "Theirs", self.STRATEGY)

        items = list_course_strategies(user_id)
        assert {item["course_name"] for item in items} == {"Torrey Pines South", "Oak Hollow"}
        assert all("strategy_json" not in item for item in items)
