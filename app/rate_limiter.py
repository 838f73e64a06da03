# app/rate_limiter.py
"""
In-memory rate limiter for the analysis endpoint.

Each analysis (preview included) costs a model call, so anonymous
previews are throttled per client IP with a token bucket:
- Each IP gets a bucket with burst_size capacity
- Tokens refill at requests_per_minute / 60 per second
- Each request consumes 1 token; an empty bucket means 429

Single-instance only (no shared state).

Test mode:
- FAIRWAY_RATE_LIMIT_MODE=ci or off bypasses limiting
- Bypass never activates when APP_ENV=production
"""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request

from app.errors import api_error

_logger = logging.getLogger(__name__)

RATE_LIMIT_MODE_PROD = "prod"
RATE_LIMIT_MODE_CI = "ci"
RATE_LIMIT_MODE_OFF = "off"

STALE_BUCKET_SECONDS = 300.0

_bypass_warning_logged = False


def _get_rate_limit_mode() -> str:
    return os.environ.get("FAIRWAY_RATE_LIMIT_MODE", RATE_LIMIT_MODE_PROD).lower()


def _is_production() -> bool:
    return os.environ.get("APP_ENV", "").lower() == "production"


def _is_bypass_allowed() -> bool:
    global _bypass_warning_logged

    mode = _get_rate_limit_mode()
    if mode == RATE_LIMIT_MODE_PROD:
        return False

    if _is_production():
        _logger.error(
            f"SECURITY: Rate limit bypass attempted in production with mode={mode}. "
            "Bypass DENIED."
        )
        return False

    if not _bypass_warning_logged:
        _logger.warning(f"RATE_LIMIT_BYPASS_ACTIVE: mode={mode}")
        _bypass_warning_logged = True
    return True


@dataclass
class TokenBucket:
    """Token bucket for a single client."""
    tokens: float
    last_refill: float
    max_tokens: float
    refill_rate: float  # tokens per second

    def consume(self, now: float) -> Tuple[bool, float]:
        """
        Try to consume a token.

        Returns:
            (allowed, retry_after_seconds)
        """
        elapsed = now - self.last_refill
        self.tokens = min(self.max_tokens, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True, 0.0
        return False, (1.0 - self.tokens) / self.refill_rate


@dataclass
class RateLimiter:
    """
    Per-IP token bucket limiter.

    Attributes:
        requests_per_minute: Sustained request rate
        burst_size: Bucket capacity
        clock: Callable returning current time (for testing)
    """
    requests_per_minute: int = 6
    burst_size: int = 3
    clock: Callable[[], float] = field(default=time.time)
    _buckets: Dict[str, TokenBucket] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)
    _last_cleanup: float = 0.0

    def __post_init__(self):
        self._refill_rate = self.requests_per_minute / 60.0
        self._last_cleanup = self.clock()

    def check(self, client_ip: str) -> Tuple[bool, float]:
        now = self.clock()

        with self._lock:
            if now - self._last_cleanup > 60.0:
                self._buckets = {
                    ip: bucket
                    for ip, bucket in self._buckets.items()
                    if now - bucket.last_refill <= STALE_BUCKET_SECONDS
                }
                self._last_cleanup = now

            bucket = self._buckets.get(client_ip)
            if bucket is None:
                bucket = TokenBucket(
                    tokens=self.burst_size,
                    last_refill=now,
                    max_tokens=self.burst_size,
                    refill_rate=self._refill_rate,
                )
                self._buckets[client_ip] = bucket

            return bucket.consume(now)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


class BypassRateLimiter:
    """Always allows; used in CI/test mode."""

    def check(self, client_ip: str) -> Tuple[bool, float]:
        return True, 0.0

    def reset(self) -> None:
        pass


def get_client_ip(request) -> str:
    """
    Client IP, trusting only the first X-Forwarded-For entry.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter():
    """Global limiter, or a bypass limiter in CI/test mode."""
    global _rate_limiter

    if _is_bypass_allowed():
        return BypassRateLimiter()

    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def set_rate_limiter(limiter: Optional[RateLimiter]) -> None:
    """Replace the global limiter (for testing)."""
    global _rate_limiter
    _rate_limiter = limiter


async def enforce_analysis_rate_limit(request: Request) -> None:
    """FastAPI dependency: 429 with Retry-After when the bucket is empty."""
    client_ip = get_client_ip(request)
    allowed, retry_after = get_rate_limiter().check(client_ip)
    if allowed:
        return

    _logger.warning(f"Analysis rate limit hit for {client_ip}")
    exc = api_error(429, "Too many analyses, try again shortly", "rate_limited")
    exc.headers = {"Retry-After": str(max(1, int(retry_after + 0.999)))}
    raise exc
