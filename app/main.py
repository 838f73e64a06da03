"""Fairway API - FastAPI application entrypoint."""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import load_config, log_config_snapshot
from app.correlation import CorrelationIdMiddleware, RequestIdLogFilter
from app.errors import error_response, http_exception_handler, validation_exception_handler
from app.routers import analyses
from app.routers import auth
from app.routers import ghin
from app.routers import payments
from app.routers import strategies
from billing.stripe_client import init_stripe
from persistence import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdLogFilter())
logger = logging.getLogger(__name__)

# Load and validate configuration at startup
_config = load_config()
log_config_snapshot(_config)

MAX_REQUEST_SIZE_BYTES = _config.max_request_size_bytes


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests exceeding size limit to prevent payload bombs."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE_BYTES:
            return error_response(413, "Request entity too large", "payload_too_large")
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


_SERVICE_START_TIME = datetime.now(timezone.utc)

app = FastAPI(
    title="Fairway",
    description="Scorecard analysis and golf strategy coaching",
    version=_config.service_version,
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(_config.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-Id"],
)

# Middleware stack (the last one added runs first)
# 1. CorrelationId: wraps everything, adds X-Request-Id to responses
# 2. SecurityHeaders
# 3. RequestSizeLimit: rejects oversized uploads before routing
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth.router)
app.include_router(payments.router)
app.include_router(analyses.router)
app.include_router(strategies.router)
app.include_router(ghin.router)


@app.on_event("startup")
async def startup_event():
    """Initialize database tables and the Stripe client."""
    init_db()
    init_stripe()
    logger.info("Database initialized")


@app.get("/api/health")
async def health():
    """Health check with service observability."""
    return {
        "status": "healthy",
        "service": _config.service_name,
        "version": _config.service_version,
        "environment": _config.environment,
        "started_at": _SERVICE_START_TIME.isoformat(),
    }
