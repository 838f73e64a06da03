"""Configure pytest for the Fairway project."""
import os

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set environment for tests BEFORE any imports
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("FAIRWAY_RATE_LIMIT_MODE", "ci")
os.environ.setdefault("FAIRWAY_BCRYPT_ROUNDS", "4")
os.environ.setdefault("ANALYZER_PROVIDER", "mock")
os.environ.setdefault("HANDICAP_PROVIDER", "mock")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")


@pytest.fixture(autouse=True)
def fresh_database(tmp_path, monkeypatch):
    """Point the database at a per-test file and start from an empty schema."""
    import persistence.db as db_module

    monkeypatch.setattr(db_module, "DB_PATH", tmp_path / "fairway.db")
    with db_module._init_lock:
        db_module._initialized = False

    yield

    db_module.close_db()
    with db_module._init_lock:
        db_module._initialized = False
