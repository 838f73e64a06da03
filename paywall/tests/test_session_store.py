"""Tests for the session store."""
import asyncio

import pytest

from paywall.errors import AuthError, NetworkError, SessionExpiredError
from paywall.models import Session, SubscriptionTier
from paywall.session import SessionStore
from paywall.storage import PENDING_RESULT_KEY, TOKEN_KEY


class TestIdentity:
    def test_starts_anonymous(self, store):
        assert store.session == Session()
        assert store.session.token is None

    def test_login_stores_token(self, store, backend, storage):
        backend.add_user("tok", credits=3, email="pat@example.com")

        session = asyncio.run(store.login("pat@example.com", "pw"))

        assert session.is_authenticated
        assert session.token == "tok"
        assert session.profile.credits == 3
        assert storage.get(TOKEN_KEY) == "tok"

    def test_failed_login_keeps_identity(self, store, storage):
        with pytest.raises(AuthError):
            asyncio.run(store.login("nobody@example.com", "pw"))

        assert not store.session.is_authenticated
        assert storage.get(TOKEN_KEY) is None

    def test_network_failure_keeps_identity(self, store, backend):
        backend.add_user("tok", email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))

        async def unreachable(*args, **kwargs):
            raise NetworkError()

        backend.login = unreachable
        with pytest.raises(NetworkError):
            asyncio.run(store.login("pat@example.com", "pw"))

        assert store.session.token == "tok"

    def test_register(self, store):
        session = asyncio.run(store.register("new@example.com", "Fairway123"))

        assert session.profile.email == "new@example.com"
        assert session.profile.credits == 1

    def test_logout_clears_token_and_pending(self, store, backend, storage, pending, preview, snapshot):
        backend.add_user("tok", email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))
        pending.store(preview, snapshot)

        asyncio.run(store.logout())

        assert not store.session.is_authenticated
        assert storage.get(TOKEN_KEY) is None
        assert storage.get(PENDING_RESULT_KEY) is None
        assert pending.restore() is None

    def test_expire_keeps_durable_pending(self, store, backend, storage, pending, preview, snapshot):
        backend.add_user("tok", email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))
        pending.store(preview, snapshot)

        asyncio.run(store.expire())

        assert not store.session.is_authenticated
        assert storage.get(TOKEN_KEY) is None
        assert storage.get(PENDING_RESULT_KEY) is not None
        assert pending.restore().payload == preview


class TestRestore:
    def test_restores_valid_token(self, backend, storage, pending):
        backend.add_user("tok", credits=2)
        storage.set(TOKEN_KEY, "tok")

        session = asyncio.run(SessionStore(backend, storage, pending).restore())

        assert session.token == "tok"
        assert session.profile.credits == 2

    def test_invalid_token_removed(self, backend, storage, pending):
        storage.set(TOKEN_KEY, "stale")

        session = asyncio.run(SessionStore(backend, storage, pending).restore())

        assert not session.is_authenticated
        assert storage.get(TOKEN_KEY) is None

    def test_network_failure_keeps_token(self, backend, storage, pending):
        storage.set(TOKEN_KEY, "tok")

        async def unreachable(token):
            raise NetworkError()

        backend.get_profile = unreachable
        with pytest.raises(NetworkError):
            asyncio.run(SessionStore(backend, storage, pending).restore())

        assert storage.get(TOKEN_KEY) == "tok"

    def test_no_token_is_noop(self, store, backend):
        asyncio.run(store.restore())
        assert backend.profile_calls == 0


class TestProfile:
    def test_update_credits_is_local(self, store, backend):
        backend.add_user("tok", credits=1, email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))
        calls_before = backend.profile_calls

        asyncio.run(store.update_credits(4))

        assert store.session.profile.credits == 4
        assert backend.profile_calls == calls_before

    def test_update_credits_when_anonymous(self, store):
        assert asyncio.run(store.update_credits(4)) == Session()

    def test_refresh_profile(self, store, backend):
        backend.add_user("tok", credits=0, email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))
        backend.profiles["tok"] = backend.profiles["tok"].model_copy(
            update={"subscriptionStatus": SubscriptionTier.PRO, "credits": "unlimited"}
        )

        session = asyncio.run(store.refresh_profile())

        assert session.profile.is_pro

    def test_refresh_with_rejected_token_expires(self, store, backend, storage):
        backend.add_user("tok", email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))
        del backend.profiles["tok"]

        with pytest.raises(SessionExpiredError):
            asyncio.run(store.refresh_profile())

        assert not store.session.is_authenticated
        assert storage.get(TOKEN_KEY) is None

    def test_refresh_ignored_after_logout_in_flight(self, store, backend):
        backend.add_user("tok", email="pat@example.com")

        async def scenario():
            await store.login("pat@example.com", "pw")
            await asyncio.gather(store.refresh_profile(), store.logout())

        asyncio.run(scenario())
        assert not store.session.is_authenticated

    def test_update_profile(self, store, backend):
        backend.add_user("tok", email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))

        session = asyncio.run(store.update_profile(homeCourse="Oak Hollow"))

        assert session.profile.home_course == "Oak Hollow"

    def test_update_profile_requires_login(self, store):
        with pytest.raises(SessionExpiredError):
            asyncio.run(store.update_profile(name="Pat"))


class TestListeners:
    def test_listeners_called_in_order(self, store, backend):
        backend.add_user("tok", email="pat@example.com")
        calls = []

        async def first(change):
            calls.append(("first", change.became_authenticated))

        async def second(change):
            calls.append(("second", change.became_authenticated))

        store.subscribe(first)
        store.subscribe(second)
        asyncio.run(store.login("pat@example.com", "pw"))

        assert calls == [("first", True), ("second", True)]

    def test_failing_listener_does_not_block_others(self, store, backend):
        backend.add_user("tok", email="pat@example.com")
        calls = []

        async def broken(change):
            raise RuntimeError("boom")

        async def healthy(change):
            calls.append(change)

        store.subscribe(broken)
        store.subscribe(healthy)
        asyncio.run(store.login("pat@example.com", "pw"))

        assert len(calls) == 1

    def test_unchanged_session_not_notified(self, store, backend):
        backend.add_user("tok", credits=2, email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))
        calls = []

        async def listener(change):
            calls.append(change)

        store.subscribe(listener)
        asyncio.run(store.update_credits(2))

        assert calls == []

    def test_unsubscribe(self, store):
        calls = []

        async def listener(change):
            calls.append(change)

        unsubscribe = store.subscribe(listener)
        unsubscribe()
        unsubscribe()
        asyncio.run(store.register("new@example.com", "Fairway123"))

        assert calls == []

    def test_logout_reports_became_anonymous(self, store, backend):
        backend.add_user("tok", email="pat@example.com")
        asyncio.run(store.login("pat@example.com", "pw"))
        changes = []

        async def listener(change):
            changes.append(change)

        store.subscribe(listener)
        asyncio.run(store.logout())

        assert changes[0].became_anonymous
