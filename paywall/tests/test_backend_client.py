"""Tests for the backend client: error mapping and response validation."""
import asyncio
import json

import httpx
import pytest

from paywall.api import BackendClient, error_from_response
from paywall.config import ClientConfig
from paywall.errors import (
    ApiError,
    AuthError,
    CodeError,
    CommitError,
    MalformedResponseError,
    NetworkError,
    PaymentError,
    SessionExpiredError,
    UpgradeRequiredError,
)
from paywall.models import PendingResult

USER = {"id": "u1", "email": "pat@example.com", "credits": 1, "subscriptionStatus": "free"}


def _call(handler, method, *args, **kwargs):
    """Run one client method against a mock transport."""

    async def run():
        async with BackendClient("http://api.test", transport=httpx.MockTransport(handler)) as api:
            return await getattr(api, method)(*args, **kwargs)

    return asyncio.run(run())


def _respond(status, body):
    return lambda request: httpx.Response(status, json=body)


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status,body,error_class,code",
        [
            (401, {"error": "Invalid credentials", "code": "invalid_credentials"}, AuthError, "invalid_credentials"),
            (400, {"error": "Email already registered", "code": "email_taken"}, AuthError, "email_taken"),
            (400, {"error": "Too short", "code": "weak_password"}, AuthError, "weak_password"),
            (401, {"error": "Invalid or expired token", "code": "invalid_token"}, SessionExpiredError, "invalid_token"),
            (403, {"error": "No credits remaining", "code": "x", "needsUpgrade": True}, UpgradeRequiredError, "upgrade_required"),
            (403, {"error": "No credits remaining", "code": "upgrade_required"}, UpgradeRequiredError, "upgrade_required"),
            (400, {"error": "Invalid trial code", "code": "invalid_code"}, CodeError, "invalid_code"),
            (503, {"error": "Payments are not available", "code": "billing_disabled"}, PaymentError, "billing_disabled"),
            (502, {"error": "Failed", "code": "checkout_creation_failed"}, PaymentError, "checkout_creation_failed"),
            (500, {"error": "Boom", "code": "webhook_failed"}, ApiError, "webhook_failed"),
        ],
    )
    def test_maps_codes(self, status, body, error_class, code):
        error = error_from_response(httpx.Response(status, json=body))

        assert type(error) is error_class
        assert error.code == code
        assert error.status_code == status
        assert str(error) == body["error"]

    def test_non_json_body(self):
        error = error_from_response(httpx.Response(502, text="<html>Bad Gateway</html>"))

        assert isinstance(error, ApiError)
        assert error.code == "api_error"
        assert "Bad Gateway" in str(error)

    def test_empty_body_uses_status(self):
        error = error_from_response(httpx.Response(500))
        assert str(error) == "Request failed (500)"


class TestTransport:
    def test_timeout_is_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError, match="too long"):
            _call(handler, "login", "pat@example.com", "pw")

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            _call(handler, "login", "pat@example.com", "pw")
        assert exc_info.value.code == "network_error"

    def test_invalid_json_success(self):
        handler = lambda request: httpx.Response(200, text="not json")
        with pytest.raises(MalformedResponseError):
            _call(handler, "get_profile", "tok")

    def test_schema_mismatch(self):
        with pytest.raises(MalformedResponseError):
            _call(_respond(200, {"token": "tok"}), "login", "pat@example.com", "pw")

    def test_negative_credits_rejected(self):
        with pytest.raises(MalformedResponseError):
            _call(_respond(200, {**USER, "credits": -1}), "get_profile", "tok")


class TestRequests:
    def test_login_parses_payload(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "token": "tok", "user": USER})

        payload = _call(handler, "login", "pat@example.com", "pw")

        assert seen == {"path": "/api/auth/login", "body": {"email": "pat@example.com", "password": "pw"}}
        assert payload.token == "tok"
        assert payload.user.to_profile().credits == 1

    def test_bearer_token_sent(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={**USER, "credits": "unlimited", "subscriptionStatus": "pro"})

        profile = _call(handler, "get_profile", "tok")

        assert seen["auth"] == "Bearer tok"
        assert profile.to_profile().is_pro

    def test_create_checkout_returns_url(self):
        handler = _respond(200, {"url": "https://checkout.stripe.test/cs_1", "sessionId": "cs_1"})
        assert _call(handler, "create_checkout", "tok", "single") == "https://checkout.stripe.test/cs_1"

    def test_analyze_sends_multipart(self):
        seen = {}

        def handler(request):
            seen["content_type"] = request.headers["Content-Type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"success": True, "preview": True, "analysis": {"summary": {}}})

        payload = _call(
            handler,
            "analyze",
            {"name": "Pat", "handicap": "18", "strengths": ["putting"], "missDescription": None},
            [("card.png", b"\x89PNG", "image/png")],
            preview=True,
        )

        assert payload.preview is True
        assert seen["content_type"].startswith("multipart/form-data")
        assert b'name="strengths"' in seen["body"]
        assert b'["putting"]' in seen["body"]
        assert b'name="missDescription"' not in seen["body"]
        assert b'filename="card.png"' in seen["body"]


class TestSaveAnalysis:
    def _pending(self):
        return PendingResult(
            payload={"summary": {"keyInsight": "x"}},
            form_snapshot={"name": "Pat", "handicap": 18.0, "homeCourse": "Oak Hollow", "missPattern": "slice"},
        )

    def test_sends_snapshot_fields(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "analysisId": "a1", "creditsRemaining": 0})

        saved = _call(handler, "save_analysis", "tok", self._pending())

        assert saved.analysisId == "a1"
        assert seen["body"]["homeCourse"] == "Oak Hollow"
        assert seen["body"]["analysis"] == {"summary": {"keyInsight": "x"}}

    def test_server_error_is_commit_error(self):
        with pytest.raises(CommitError) as exc_info:
            _call(_respond(500, {"error": "db down", "code": "internal"}), "save_analysis", "tok", self._pending())
        assert exc_info.value.status_code == 500

    def test_expired_token_not_wrapped(self):
        with pytest.raises(SessionExpiredError):
            _call(_respond(401, {"error": "expired", "code": "invalid_token"}), "save_analysis", "tok", self._pending())

    def test_malformed_success_is_commit_error(self):
        with pytest.raises(CommitError):
            _call(_respond(200, {"success": True}), "save_analysis", "tok", self._pending())


class TestClientConfig:
    def test_defaults(self, monkeypatch):
        for name in ("FAIRWAY_API_URL", "FAIRWAY_HTTP_TIMEOUT_SECONDS", "FAIRWAY_STORAGE_PATH"):
            monkeypatch.delenv(name, raising=False)

        config = ClientConfig.from_env()

        assert config.api_url == "http://localhost:8000"
        assert config.timeout_seconds == 30.0
        assert type(config.make_storage()).__name__ == "MemoryStorage"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FAIRWAY_API_URL", "https://api.fairway.test/")
        monkeypatch.setenv("FAIRWAY_HTTP_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("FAIRWAY_STORAGE_PATH", str(tmp_path / "state.json"))

        config = ClientConfig.from_env()

        assert config.api_url == "https://api.fairway.test"
        assert config.timeout_seconds == 5.0
        assert type(config.make_storage()).__name__ == "JsonFileStorage"

    @pytest.mark.parametrize("raw", ["soon", "0", "-3"])
    def test_bad_timeout_uses_default(self, monkeypatch, raw):
        monkeypatch.setenv("FAIRWAY_HTTP_TIMEOUT_SECONDS", raw)
        assert ClientConfig.from_env().timeout_seconds == 30.0
