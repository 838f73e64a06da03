# app/analysis/config.py
"""
Configuration for scorecard analysis.

Environment variables:
- ANALYZER_PROVIDER: "mock" (default) or "openai"
- ANALYSIS_MODEL: OpenAI model used for scorecard vision and strategy (default: gpt-4o)
- OPENAI_API_KEY: Required for the openai analyzer
"""

import os

DEFAULT_ANALYZER_PROVIDER = "mock"


def get_analyzer_provider() -> str:
    return os.environ.get("ANALYZER_PROVIDER", DEFAULT_ANALYZER_PROVIDER).lower().strip()


def get_analysis_model() -> str:
    return os.environ.get("ANALYSIS_MODEL", "gpt-4o")


def get_openai_api_key() -> str | None:
    return os.environ.get("OPENAI_API_KEY")


def is_openai_configured() -> bool:
    key = get_openai_api_key()
    return key is not None and len(key) > 0


# Maximum size per scorecard image (10MB)
MAX_IMAGE_SIZE = 10 * 1024 * 1024

ALLOWED_IMAGE_TYPES = [
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/heic",
]
