import asyncio
from typing import Any

from hr_portal.core.errors import AuthenticationError
from hr_portal.core.logger import get_logger
from hr_portal.identity.base import AuthEvent, AuthEventType, AuthSession, Identity
from hr_portal.identity.channel import AuthEventChannel
from hr_portal.identity.provider import IdentityProvider

logger = get_logger(__name__)


class LocalSessionStore:
    """
    SessionStore for one portal session, backed by an in-process IdentityProvider.

    Holds the current session (what a browser keeps in local storage) and
    publishes auth events to every open channel.
    """

    def __init__(self, provider: IdentityProvider):
        self._provider = provider
        self._session: AuthSession | None = None
        self._channels: set[AuthEventChannel] = set()

    def subscribe(self) -> AuthEventChannel:
        channel = AuthEventChannel(on_close=self._channels.discard)
        self._channels.add(channel)
        return channel

    def _emit(self, event_type: AuthEventType, session: AuthSession | None) -> None:
        event = AuthEvent(event_type, session)
        for channel in list(self._channels):
            channel.publish(event)

    @property
    def current(self) -> AuthSession | None:
        """The held session as is, without refreshing an expired one."""
        return self._session

    async def get_session(self) -> AuthSession | None:
        """Current session; an expired one is refreshed, or dropped if it cannot be."""
        session = self._session
        if session is None or not session.is_expired():
            return session
        try:
            return await self.refresh_session()
        except AuthenticationError:
            logger.info("Stored session expired and could not be refreshed")
            self._session = None
            self._emit(AuthEventType.SIGNED_OUT, None)
            return None

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        session = await asyncio.to_thread(self._provider.sign_in_with_password, email, password)
        self._session = session
        self._emit(AuthEventType.SIGNED_IN, session)
        return session

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any] | None = None) -> Identity:
        return await asyncio.to_thread(self._provider.sign_up, email, password, metadata)

    async def sign_out(self) -> None:
        session, self._session = self._session, None
        try:
            if session is not None:
                await asyncio.to_thread(self._provider.revoke, session.access_token)
        finally:
            self._emit(AuthEventType.SIGNED_OUT, None)

    async def get_current_identity(self) -> Identity | None:
        """Re-validates the access token with the provider rather than trusting the local copy."""
        session = self._session
        if session is None:
            return None
        return await asyncio.to_thread(self._provider.get_identity, session.access_token)

    async def refresh_session(self) -> AuthSession:
        if self._session is None:
            raise AuthenticationError("No session to refresh", user_message="You are not signed in.")
        session = await asyncio.to_thread(self._provider.refresh, self._session.refresh_token)
        self._session = session
        self._emit(AuthEventType.TOKEN_REFRESHED, session)
        return session

    def close(self) -> None:
        for channel in list(self._channels):
            channel.close()
