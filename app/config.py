# app/config.py
"""
Centralized configuration management with startup validation.

Defines REQUIRED vs OPTIONAL environment variables and provides
safe configuration loading with validation and logging.
"""
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "fairway"
SERVICE_VERSION = "0.1.0"

# Ten scorecard photos plus form fields
DEFAULT_MAX_REQUEST_SIZE_BYTES = 60 * 1_048_576
MIN_REQUEST_SIZE_BYTES = 1024

DEFAULT_FRONTEND_URL = "http://localhost:5173"

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5173",
    "https://golfstrategy.app",
    "https://www.golfstrategy.app",
)

# Sensitive substrings that should never appear in logs
SENSITIVE_SUBSTRINGS = ("key", "token", "secret", "password", "credential", "auth")


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


# =============================================================================
# Configuration Dataclass
# =============================================================================


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    # Service info
    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    # Security settings
    max_request_size_bytes: int = DEFAULT_MAX_REQUEST_SIZE_BYTES
    allowed_origins: tuple = DEFAULT_ALLOWED_ORIGINS

    # Where Stripe sends users back to
    frontend_url: str = DEFAULT_FRONTEND_URL

    analyzer_provider: str = "mock"

    # Secret presence flags (values are never stored here)
    jwt_secret_present: bool = False
    stripe_key_present: bool = False
    openai_api_key_present: bool = False

    # Warnings collected during config load
    warnings: list = field(default_factory=list)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# =============================================================================
# Configuration Loading
# =============================================================================


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message).
    On invalid input, returns default with a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        warning = f"{name}='{raw}' is not a valid integer; using default {default}"
        return default, warning

    if min_value is not None and value < min_value:
        warning = f"{name}={value} is below minimum {min_value}; using default {default}"
        return default, warning

    return value, None


def _parse_list_env(name: str, default: tuple) -> tuple:
    """Parse a comma-separated environment variable."""
    raw = os.environ.get(name, "")
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


def _present(name: str) -> bool:
    value = os.environ.get(name)
    return bool(value and len(value) > 0)


def load_config(fail_fast: bool = True) -> AppConfig:
    """
    Load and validate application configuration from environment.

    Args:
        fail_fast: If True, raise ConfigurationError on critical issues.
                   If False, collect warnings and continue.

    Raises:
        ConfigurationError: If required configuration is missing/invalid
                           and fail_fast is True.
    """
    warnings = []

    environment = os.environ.get("APP_ENV", "development").lower()

    max_request_size, size_warning = _parse_int_env(
        "MAX_REQUEST_SIZE_BYTES",
        DEFAULT_MAX_REQUEST_SIZE_BYTES,
        min_value=MIN_REQUEST_SIZE_BYTES,
    )
    if size_warning:
        warnings.append(size_warning)

    jwt_secret_present = _present("JWT_SECRET")
    stripe_key_present = _present("STRIPE_SECRET_KEY")
    openai_api_key_present = _present("OPENAI_API_KEY")

    analyzer_provider = os.environ.get("ANALYZER_PROVIDER", "mock").lower().strip()

    # JWT_SECRET is REQUIRED in production
    if not jwt_secret_present:
        message = "JWT_SECRET is not set; using the development signing secret"
        if environment == "production" and fail_fast:
            raise ConfigurationError("JWT_SECRET must be set in production")
        warnings.append(message)

    if analyzer_provider == "openai" and not openai_api_key_present:
        warnings.append(
            "ANALYZER_PROVIDER is openai but OPENAI_API_KEY is not set; "
            "analysis will return errors at runtime"
        )

    if not stripe_key_present:
        warnings.append("STRIPE_SECRET_KEY is not set; checkout is disabled")

    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return AppConfig(
        environment=environment,
        max_request_size_bytes=max_request_size,
        allowed_origins=_parse_list_env("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS),
        frontend_url=os.environ.get("FRONTEND_URL", DEFAULT_FRONTEND_URL).rstrip("/"),
        analyzer_provider=analyzer_provider,
        jwt_secret_present=jwt_secret_present,
        stripe_key_present=stripe_key_present,
        openai_api_key_present=openai_api_key_present,
        warnings=warnings,
    )


def log_config_snapshot(config: AppConfig) -> str:
    """
    Generate and log a safe configuration snapshot.

    Returns the snapshot string for testing purposes.
    Never logs actual secret values - only boolean presence flags.
    """
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"max_request_size_bytes={config.max_request_size_bytes} "
        f"analyzer_provider={config.analyzer_provider} "
        f"jwt_secret_present={config.jwt_secret_present} "
        f"stripe_key_present={config.stripe_key_present} "
        f"openai_api_key_present={config.openai_api_key_present}"
    )
    logger.info(snapshot)
    return snapshot


def validate_config_snapshot_safety(snapshot: str) -> bool:
    """
    Validate that a config snapshot doesn't contain sensitive values.

    Returns True if safe, False if potentially unsafe.
    """
    snapshot_lower = snapshot.lower()

    # "key_present=true" is fine; "key=sk-..." is not
    for sensitive in SENSITIVE_SUBSTRINGS:
        pattern = rf"{sensitive}=(?!true|false)"
        if re.search(pattern, snapshot_lower):
            return False

    return True
