# app/tests/test_config.py
"""Tests for configuration management and startup validation."""
import os
from unittest.mock import patch

import pytest

from app.config import (
    DEFAULT_ALLOWED_ORIGINS,
    DEFAULT_FRONTEND_URL,
    DEFAULT_MAX_REQUEST_SIZE_BYTES,
    MIN_REQUEST_SIZE_BYTES,
    SENSITIVE_SUBSTRINGS,
    AppConfig,
    ConfigurationError,
    load_config,
    log_config_snapshot,
    validate_config_snapshot_safety,
)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_default_values(self):
        """Config loads with sensible defaults when no env vars set."""
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        assert config.service_name == "fairway"
        assert config.service_version == "0.1.0"
        assert config.environment == "development"
        assert config.max_request_size_bytes == DEFAULT_MAX_REQUEST_SIZE_BYTES
        assert config.allowed_origins == DEFAULT_ALLOWED_ORIGINS
        assert config.frontend_url == DEFAULT_FRONTEND_URL
        assert config.analyzer_provider == "mock"
        assert config.openai_api_key_present is False
        assert config.is_production is False

    def test_missing_secrets_produce_warnings(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

        joined = " ".join(config.warnings)
        assert "JWT_SECRET" in joined
        assert "STRIPE_SECRET_KEY" in joined

    def test_production_requires_jwt_secret(self):
        with patch.dict(os.environ, {"APP_ENV": "production"}, clear=True):
            with pytest.raises(ConfigurationError):
                load_config()

    def test_production_without_fail_fast_warns(self):
        with patch.dict(os.environ, {"APP_ENV": "production"}, clear=True):
            config = load_config(fail_fast=False)

        assert config.is_production
        assert any("JWT_SECRET" in w for w in config.warnings)

    def test_production_with_secret(self):
        with patch.dict(os.environ, {"APP_ENV": "Production", "JWT_SECRET": "s3cret"}, clear=True):
            config = load_config()

        assert config.environment == "production"
        assert config.jwt_secret_present is True

    def test_openai_analyzer_without_key_warns(self):
        with patch.dict(os.environ, {"ANALYZER_PROVIDER": "OpenAI"}, clear=True):
            config = load_config()

        assert config.analyzer_provider == "openai"
        assert any("OPENAI_API_KEY" in w for w in config.warnings)

    def test_api_key_presence_detected(self):
        """API key presence is detected without storing the value."""
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test-key"}, clear=True):
            config = load_config()

        assert config.openai_api_key_present is True
        assert "sk-test-key" not in repr(config)

    def test_origins_and_frontend_url(self):
        env = {
            "ALLOWED_ORIGINS": "https://a.test, https://b.test ,",
            "FRONTEND_URL": "https://app.test/",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()

        assert config.allowed_origins == ("https://a.test", "https://b.test")
        assert config.frontend_url == "https://app.test"


class TestRequestSizeParsing:
    def test_valid_size(self):
        with patch.dict(os.environ, {"MAX_REQUEST_SIZE_BYTES": "2048"}, clear=True):
            config = load_config()
        assert config.max_request_size_bytes == 2048

    def test_invalid_size_uses_default(self):
        with patch.dict(os.environ, {"MAX_REQUEST_SIZE_BYTES": "lots"}, clear=True):
            config = load_config()
        assert config.max_request_size_bytes == DEFAULT_MAX_REQUEST_SIZE_BYTES
        assert any("not a valid integer" in w for w in config.warnings)

    def test_size_below_minimum_uses_default(self):
        too_small = str(MIN_REQUEST_SIZE_BYTES - 1)
        with patch.dict(os.environ, {"MAX_REQUEST_SIZE_BYTES": too_small}, clear=True):
            config = load_config()
        assert config.max_request_size_bytes == DEFAULT_MAX_REQUEST_SIZE_BYTES
        assert any("below minimum" in w for w in config.warnings)


class TestConfigSnapshot:
    def test_snapshot_contains_presence_flags_only(self):
        env = {"JWT_SECRET": "super-secret", "STRIPE_SECRET_KEY": "sk_test_123456789"}
        with patch.dict(os.environ, env, clear=True):
            snapshot = log_config_snapshot(load_config())

        assert "super-secret" not in snapshot
        assert "sk_test_123456789" not in snapshot
        assert "jwt_secret_present=True" in snapshot
        assert "stripe_key_present=True" in snapshot
        assert validate_config_snapshot_safety(snapshot) is True

    def test_snapshot_safety_detects_leaks(self):
        assert validate_config_snapshot_safety("stripe_key=sk_live_abc") is False
        assert validate_config_snapshot_safety("password=hunter2") is False
        assert validate_config_snapshot_safety("service=fairway") is True

    @pytest.mark.parametrize("word", SENSITIVE_SUBSTRINGS)
    def test_every_sensitive_word_checked(self, word):
        assert validate_config_snapshot_safety(f"{word}=leaked") is False
        assert validate_config_snapshot_safety(f"{word}=true") is True

    def test_dataclass_defaults(self):
        config = AppConfig()
        assert config.warnings == []
        assert config.is_production is False
