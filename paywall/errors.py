# paywall/errors.py
"""
Client error taxonomy.

Every error carries a machine `code` (mirroring the backend's error codes
where one exists) and a human message suitable for display.
"""
from __future__ import annotations

from typing import Optional


class PaywallError(Exception):
    """Base class for all client errors."""

    code = "paywall_error"

    def __init__(self, message: str = "", code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        if code:
            self.code = code
        self.status_code = status_code


class AuthError(PaywallError):
    """Authentication failed."""

    code = "auth_error"


class SessionExpiredError(AuthError):
    """Your session has expired. Please log in again."""

    code = "session_expired"


class NetworkError(PaywallError):
    """Could not reach the server. Check your connection and try again."""

    code = "network_error"


class PaymentError(PaywallError):
    """Could not start checkout."""

    code = "checkout_creation_failed"


class CommitError(PaywallError):
    """Analysis could not be saved to your account."""

    code = "persistence_failed"


class CodeError(PaywallError):
    """That code is not valid."""

    code = "invalid_code"


class UpgradeRequiredError(PaywallError):
    """No credits remaining."""

    code = "upgrade_required"


class MalformedResponseError(PaywallError):
    """The server sent a response we could not understand."""

    code = "malformed_response"


class ApiError(PaywallError):
    """Request failed."""

    code = "api_error"
