# app/tests/test_payments_api.py
"""Tests for the /api/payments endpoints."""
import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.main import app

WEBHOOK_SECRET = "whsec_api_test"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def token(client):
    response = client.post(
        "/api/auth/register",
        json={"email": "buyer@example.com", "password": "Fairway123"},
    )
    return response.json()["token"]


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _signed(event: dict):
    payload = json.dumps(event).encode("utf-8")
    timestamp = int(time.time())
    digest = hmac.new(
        WEBHOOK_SECRET.encode("utf-8"), f"{timestamp}.".encode("utf-8") + payload, hashlib.sha256
    ).hexdigest()
    return payload, {"Stripe-Signature": f"t={timestamp},v1={digest}", "Content-Type": "application/json"}


class TestPlans:
    def test_lists_plans(self, client):
        plans = client.get("/api/payments/plans").json()["plans"]
        assert {p["priceType"] for p in plans} == {"single", "monthly", "yearly"}


class TestCheckout:
    def test_requires_auth(self, client):
        response = client.post("/api/payments/create-checkout", json={"priceType": "single"})
        assert response.status_code == 401

    def test_returns_url(self, client, token):
        result = {"session_id": "cs_1", "checkout_url": "https://checkout.stripe.test/cs_1"}
        with patch("app.routers.payments.create_checkout_session", return_value=result) as create:
            response = client.post(
                "/api/payments/create-checkout", json={"priceType": "monthly"}, headers=_auth(token)
            )

        assert response.status_code == 200
        assert response.json()["url"] == "https://checkout.stripe.test/cs_1"
        user, price_type, frontend_url = create.call_args.args
        assert user.email == "buyer@example.com"
        assert price_type == "monthly"

    def test_unknown_plan(self, client, token):
        response = client.post(
            "/api/payments/create-checkout", json={"priceType": "lifetime"}, headers=_auth(token)
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_price_type"

    def test_billing_disabled(self, client, token, monkeypatch):
        monkeypatch.setenv("STRIPE_PRICE_CREDITS", "price_single")
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
        response = client.post(
            "/api/payments/create-checkout", json={"priceType": "single"}, headers=_auth(token)
        )

        assert response.status_code == 503
        assert response.json()["code"] == "billing_disabled"


class TestTrialAndStatus:
    def test_status_for_new_user(self, client, token):
        data = client.get("/api/payments/status", headers=_auth(token)).json()
        assert data == {"subscriptionStatus": "free", "credits": 1, "canAnalyze": True}

    def test_activate_trial(self, client, token):
        response = client.post("/api/payments/activate-trial", json={"code": "GOLFBETA2026"}, headers=_auth(token))
        assert response.status_code == 200

        data = client.get("/api/payments/status", headers=_auth(token)).json()
        assert data["subscriptionStatus"] == "pro"
        assert data["credits"] == "unlimited"

    def test_invalid_trial_code(self, client, token):
        response = client.post("/api/payments/activate-trial", json={"code": "WRONG"}, headers=_auth(token))

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_code"


class TestWebhook:
    def test_checkout_completed_grants_credit(self, client, token, monkeypatch):
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
        user_id = client.get("/api/auth/me", headers=_auth(token)).json()["id"]

        payload, headers = _signed({
            "id": "evt_1",
            "type": "checkout.session.completed",
            "data": {"object": {"metadata": {"user_id": user_id, "price_type": "single"}}},
        })
        response = client.post("/api/payments/webhook", content=payload, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert client.get("/api/payments/status", headers=_auth(token)).json()["credits"] == 2

    def test_bad_signature(self, client, monkeypatch):
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
        response = client.post(
            "/api/payments/webhook",
            content=b'{"type": "checkout.session.completed"}',
            headers={"Stripe-Signature": "t=1,v1=deadbeef"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_signature"

    def test_handler_failure_returns_500(self, client, monkeypatch):
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
        payload, headers = _signed({
            "id": "evt_2",
            "type": "checkout.session.completed",
            "data": {"object": {"metadata": {}}},
        })
        response = client.post("/api/payments/webhook", content=payload, headers=headers)

        assert response.status_code == 500
        assert response.json()["code"] == "webhook_failed"


class TestCustomerPortal:
    def test_without_subscription(self, client, token):
        response = client.post("/api/payments/customer-portal", headers=_auth(token))

        assert response.status_code == 400
        assert response.json()["code"] == "no_subscription"
