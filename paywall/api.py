# paywall/api.py
"""
HTTP client for the Fairway backend.

Translates transport failures and error bodies into the client error
taxonomy, and validates every success body against its wire model.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from paywall.config import ClientConfig
from paywall.errors import (
    ApiError,
    AuthError,
    CodeError,
    CommitError,
    MalformedResponseError,
    NetworkError,
    PaymentError,
    PaywallError,
    SessionExpiredError,
    UpgradeRequiredError,
)
from paywall.models import PendingResult
from paywall.schemas import (
    AnalyzePayload,
    AuthPayload,
    CheckoutPayload,
    ErrorPayload,
    ExternalAuthPayload,
    PaymentStatusPayload,
    ProfilePayload,
    ProfileUpdatePayload,
    SavePayload,
)

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# (filename, bytes, content type)
Upload = Tuple[str, bytes, str]

AUTH_CODES = {"invalid_credentials", "email_taken", "weak_password"}
PAYMENT_CODES = {"checkout_creation_failed", "billing_disabled", "invalid_price_type"}


def error_from_response(response: httpx.Response) -> PaywallError:
    """Map a non-2xx response to a client error."""
    try:
        body = ErrorPayload.model_validate(response.json())
    except (ValueError, ValidationError):
        body = ErrorPayload(error=response.text[:200])

    status = response.status_code
    message = body.error or f"Request failed ({status})"
    code = body.code

    if code in AUTH_CODES:
        return AuthError(message, code=code, status_code=status)
    if status == 401:
        return SessionExpiredError(message, code=code or None, status_code=status)
    if status == 403 and (body.needsUpgrade or code == UpgradeRequiredError.code):
        return UpgradeRequiredError(message, status_code=status)
    if code == CodeError.code:
        return CodeError(message, status_code=status)
    if code in PAYMENT_CODES:
        return PaymentError(message, code=code, status_code=status)
    return ApiError(message, code=code or None, status_code=status)


class BackendClient:
    """
    Async backend client.

    Usage:
        async with BackendClient.from_config(ClientConfig.from_env()) as api:
            auth = await api.login("a@b.com", "pw12345678")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "BackendClient":
        return cls(config.api_url, timeout=config.timeout_seconds, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        **kwargs,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            _logger.warning(f"{method} {path} timed out: {e!r}")
            raise NetworkError("The server took too long to respond. Please try again.") from e
        except httpx.HTTPError as e:
            _logger.warning(f"{method} {path} failed: {e!r}")
            raise NetworkError() from e

        if not response.is_success:
            error = error_from_response(response)
            _logger.info(f"{method} {path} -> {response.status_code} ({error.code})")
            raise error

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{method} {path} returned invalid JSON") from e

    @staticmethod
    def _parse(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            _logger.error(f"Unexpected {model.__name__} body: {e}")
            raise MalformedResponseError() from e

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def login(self, email: str, password: str) -> AuthPayload:
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        return self._parse(AuthPayload, data)

    async def register(self, email: str, password: str, name: Optional[str] = None) -> AuthPayload:
        data = await self._request(
            "POST",
            "/api/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        return self._parse(AuthPayload, data)

    async def register_with_ghin(
        self, email: str, password: str, ghin_number: str, name: Optional[str] = None
    ) -> ExternalAuthPayload:
        data = await self._request(
            "POST",
            "/api/auth/register-ghin",
            json={"email": email, "password": password, "ghinNumber": ghin_number, "name": name},
        )
        return self._parse(ExternalAuthPayload, data)

    async def get_profile(self, token: str) -> ProfilePayload:
        data = await self._request("GET", "/api/auth/me", token=token)
        return self._parse(ProfilePayload, data)

    async def update_profile(self, token: str, **fields) -> ProfilePayload:
        data = await self._request("PUT", "/api/auth/profile", token=token, json=fields)
        return self._parse(ProfileUpdatePayload, data).user

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    async def create_checkout(self, token: str, price_type: str) -> str:
        """Returns the checkout URL to navigate to."""
        data = await self._request(
            "POST", "/api/payments/create-checkout", token=token, json={"priceType": price_type}
        )
        return self._parse(CheckoutPayload, data).url

    async def activate_trial(self, token: str, code: str) -> None:
        await self._request("POST", "/api/payments/activate-trial", token=token, json={"code": code})

    async def payment_status(self, token: str) -> PaymentStatusPayload:
        data = await self._request("GET", "/api/payments/status", token=token)
        return self._parse(PaymentStatusPayload, data)

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    async def analyze(
        self,
        fields: Dict[str, Any],
        scorecards: Optional[List[Upload]] = None,
        preview: bool = False,
        token: Optional[str] = None,
    ) -> AnalyzePayload:
        """
        Run an analysis. `fields` are the multipart form fields; lists are
        sent JSON-encoded.
        """
        form = {
            key: json.dumps(value) if isinstance(value, (list, dict)) else str(value)
            for key, value in fields.items()
            if value is not None
        }
        form["preview"] = "true" if preview else "false"
        files = [("scorecards", upload) for upload in scorecards or []]
        data = await self._request("POST", "/api/analyze", token=token, data=form, files=files or None)
        return self._parse(AnalyzePayload, data)

    async def save_analysis(self, token: str, pending: PendingResult) -> SavePayload:
        """
        Commit a pending preview to the account.

        Raises:
            CommitError: If the server did not save it
            SessionExpiredError: If the token is no longer valid
            UpgradeRequiredError: If the account has no credit
        """
        snapshot = pending.form_snapshot
        body = {
            "analysis": pending.payload,
            "name": snapshot.get("name"),
            "handicap": snapshot.get("handicap"),
            "homeCourse": snapshot.get("homeCourse"),
            "missPattern": snapshot.get("missPattern"),
        }
        try:
            data = await self._request("POST", "/api/analyses/save", token=token, json=body)
        except (ApiError, NetworkError, MalformedResponseError) as e:
            raise CommitError(str(e), status_code=e.status_code) from e
        try:
            return self._parse(SavePayload, data)
        except MalformedResponseError as e:
            raise CommitError(str(e)) from e
