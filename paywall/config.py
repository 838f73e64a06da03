# paywall/config.py
"""
Client configuration.

Environment variables:
- FAIRWAY_API_URL: Backend base URL (default: http://localhost:8000)
- FAIRWAY_HTTP_TIMEOUT_SECONDS: Per-request timeout (default: 30)
- FAIRWAY_STORAGE_PATH: JSON file for durable client state
  (default: in-memory only)
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from paywall.storage import JsonFileStorage, MemoryStorage, Storage

_logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _parse_float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        _logger.warning(f"[CONFIG] {name}='{raw}' is not a number; using default {default}")
        return default
    if value <= 0:
        _logger.warning(f"[CONFIG] {name}={value} must be positive; using default {default}")
        return default
    return value


@dataclass(frozen=True)
class ClientConfig:
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    storage_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        return cls(
            api_url=os.environ.get("FAIRWAY_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout_seconds=_parse_float_env("FAIRWAY_HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            storage_path=os.environ.get("FAIRWAY_STORAGE_PATH") or None,
        )

    def make_storage(self) -> Storage:
        if self.storage_path:
            return JsonFileStorage(self.storage_path)
        return MemoryStorage()
