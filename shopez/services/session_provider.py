# shopez/services/session_provider.py

"""Holds the signed-in identity and tells listeners when it changes."""

import asyncio
import logging
from collections.abc import Callable

from shopez.clients.auth_client import AuthClient
from shopez.config.settings import Settings
from shopez.errors import ValidationError
from shopez.models.session import Session

logger = logging.getLogger("shopez.session")

IdentityListener = Callable[[Session | None], None]


class SessionProvider:
    """The one place the current identity lives.

    Code that needs the user receives the :class:`Session` from here as an
    explicit argument; nothing else looks it up.  Listeners are called on
    the event loop thread.
    """

    def __init__(self, auth: AuthClient | None = None) -> None:
        self.auth = auth or AuthClient()
        self._session: Session | None = None
        self._listeners: list[IdentityListener] = []

    @property
    def current(self) -> Session | None:
        return self._session

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register *listener*, call it with the current identity now.

        Returns a callable that unregisters the listener.
        """
        self._listeners.append(listener)
        listener(self._session)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, session: Session | None) -> None:
        self._session = session
        logger.info(
            "Identity changed: %s",
            session.uid if session else "signed out",
        )
        for listener in list(self._listeners):
            listener(session)

    @staticmethod
    def _validate(email: str, password: str) -> tuple[str, str]:
        email = email.strip()
        if not email or not password:
            raise ValidationError("Please provide email and password.")
        return email, password

    async def sign_in(self, email: str, password: str) -> Session:
        """Authenticate and publish the new identity."""
        email, password = self._validate(email, password)
        session = await asyncio.to_thread(self.auth.sign_in, email, password)
        self._set(session)
        return session

    async def register(self, email: str, password: str) -> Session:
        """Create an account, then publish it as the current identity."""
        email, password = self._validate(email, password)
        session = await asyncio.to_thread(
            self.auth.register, email, password
        )
        self._set(session)
        return session

    def sign_out(self) -> None:
        if self._session is None:
            return
        self._set(None)

    async def fresh_session(self) -> Session | None:
        """Current session, refreshed first if its token is about to expire.

        Refresh failures sign the user out and re-raise.
        """
        session = self._session
        if session is None or not session.refresh_token:
            return session
        if not session.expires_within(Settings.TOKEN_REFRESH_MARGIN):
            return session
        try:
            refreshed = await asyncio.to_thread(self.auth.refresh, session)
        except Exception:
            logger.warning(
                "Token refresh failed for uid=%s", session.uid, exc_info=True
            )
            self._set(None)
            raise
        # Same identity, new token: no listener notification
        self._session = refreshed
        return refreshed
