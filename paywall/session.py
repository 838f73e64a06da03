# paywall/session.py
"""
Session store: who the user is and what their account can do.

The store is the single writer of the Session. Listeners subscribed with
`subscribe()` are awaited in subscription order after every change; the
unlock orchestrator is one of them.

Failed network calls never change identity.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional, Tuple

from paywall.api import BackendClient
from paywall.errors import SessionExpiredError
from paywall.models import Credits, Session, SessionChange
from paywall.pending import PendingResultHolder
from paywall.schemas import AuthPayload, ExternalProfile, ProfilePayload
from paywall.storage import TOKEN_KEY, Storage

_logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionChange], Awaitable[None]]


class SessionStore:
    def __init__(
        self,
        api: BackendClient,
        storage: Storage,
        pending: Optional[PendingResultHolder] = None,
    ):
        self._api = api
        self._storage = storage
        self._pending = pending
        self._session = Session()
        self._listeners: List[SessionListener] = []

    @property
    def session(self) -> Session:
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _set(self, session: Session) -> None:
        previous = self._session
        if previous == session:
            return
        self._session = session

        change = SessionChange(previous=previous, current=session)
        for listener in list(self._listeners):
            try:
                await listener(change)
            except Exception:
                _logger.exception(f"Session listener {listener!r} failed")

    async def _authenticate(self, token: str, user: ProfilePayload) -> Session:
        self._storage.set(TOKEN_KEY, token)
        await self._set(Session.authenticated(token, user.to_profile()))
        _logger.info(f"Session authenticated for user {user.id}")
        return self._session

    # -------------------------------------------------------------------------
    # Identity
    # -------------------------------------------------------------------------

    async def login(self, email: str, password: str) -> Session:
        """
        Raises:
            AuthError: invalid_credentials
            NetworkError: Server unreachable or timed out
        """
        payload: AuthPayload = await self._api.login(email, password)
        return await self._authenticate(payload.token, payload.user)

    async def register(self, email: str, password: str, name: Optional[str] = None) -> Session:
        """
        Raises:
            AuthError: email_taken or weak_password
            NetworkError: Server unreachable or timed out
        """
        payload = await self._api.register(email, password, name=name)
        return await self._authenticate(payload.token, payload.user)

    async def register_with_external_identity(
        self,
        email: str,
        password: str,
        ghin_number: str,
        name: Optional[str] = None,
    ) -> Tuple[Session, ExternalProfile]:
        """Register with a GHIN number; returns the handicap record for pre-fill."""
        payload = await self._api.register_with_ghin(email, password, ghin_number, name=name)
        session = await self._authenticate(payload.token, payload.user)
        return session, payload.ghin

    async def logout(self) -> None:
        """Explicit logout: forget the token and any pending preview."""
        self._storage.delete(TOKEN_KEY)
        if self._pending is not None:
            self._pending.clear()
        await self._set(Session())
        _logger.info("Logged out")

    async def expire(self) -> None:
        """
        Implicit logout after the server rejected the token.

        Only the in-memory pending copy is dropped; the durable one stays so
        the preview can still be unlocked after logging back in.
        """
        self._storage.delete(TOKEN_KEY)
        if self._pending is not None:
            self._pending.forget_memory()
        await self._set(Session())
        _logger.warning("Session expired")

    async def restore(self) -> Session:
        """
        Reload a durable token at startup.

        An invalid token is removed and the store stays anonymous. A network
        failure leaves the token in place for the next attempt.
        """
        token = self._storage.get(TOKEN_KEY)
        if not token or self._session.is_authenticated:
            return self._session

        try:
            user = await self._api.get_profile(token)
        except SessionExpiredError:
            _logger.info("Stored token rejected; staying anonymous")
            self._storage.delete(TOKEN_KEY)
            return self._session

        return await self._authenticate(token, user)

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    async def refresh_profile(self) -> Session:
        """Re-fetch credits and tier. No-op when anonymous."""
        token = self._session.token
        if token is None:
            return self._session

        try:
            user = await self._api.get_profile(token)
        except SessionExpiredError:
            await self.expire()
            raise

        # The session may have changed while the request was in flight
        if self._session.token != token:
            return self._session

        await self._set(Session.authenticated(token, user.to_profile()))
        return self._session

    async def update_credits(self, credits: Credits) -> Session:
        """Local optimistic credit update; no network call."""
        profile = self._session.profile
        if profile is None:
            return self._session
        await self._set(Session.authenticated(self._session.token, profile.with_credits(credits)))
        return self._session

    async def update_profile(self, **fields) -> Session:
        """Update display fields (name, handicap, homeCourse) on the server."""
        token = self._session.token
        if token is None:
            raise SessionExpiredError("Log in to update your profile")

        try:
            user = await self._api.update_profile(token, **fields)
        except SessionExpiredError:
            await self.expire()
            raise

        await self._set(Session.authenticated(token, user.to_profile()))
        return self._session
