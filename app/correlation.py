# app/correlation.py
"""
Request correlation IDs.

Provides:
- X-Request-Id handling (a safe client value is kept, otherwise a UUID4)
- The ID on request.state and in a context variable for the request's task
- A logging filter that stamps every record with the current request ID
"""
from __future__ import annotations

import contextvars
import logging
import re
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

MAX_REQUEST_ID_LENGTH = 64
# Alphanumeric, hyphens and underscores only (safe for logging)
SAFE_REQUEST_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

REQUEST_ID_HEADER = "X-Request-Id"

_current_request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "fairway_request_id", default=None
)


def validate_request_id(request_id: Optional[str]) -> Optional[str]:
    """Return the client-provided ID if it is safe to reuse, else None."""
    if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
        return None
    if not SAFE_REQUEST_ID_PATTERN.match(request_id):
        return None
    return request_id


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id(request: Optional[Request] = None) -> Optional[str]:
    """Request ID from request state, or from the current context."""
    if request is not None:
        return getattr(request.state, "request_id", None)
    return _current_request_id.get()


class RequestIdLogFilter(logging.Filter):
    """Adds `request_id` to log records ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _current_request_id.get() or "-"
        return True


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Assigns each request an ID and echoes it in the X-Request-Id response header."""

    async def dispatch(self, request: Request, call_next):
        request_id = validate_request_id(request.headers.get("x-request-id")) or generate_request_id()
        request.state.request_id = request_id

        token = _current_request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
