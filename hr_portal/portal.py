"""
Portal sessions.

A PortalSession is what one browser tab holds: its own SessionStore client,
AuthService and SessionBootstrap (and therefore its own ViewState). The HTTP
layer finds it by cookie through the PortalRegistry.

Only portals that hold a session are kept between requests. A portal that
ends a request without one (anonymous visit, sign-out, failed load) is
closed. Kept portals are closed after `idle_ttl` seconds without a request,
and the least recently used ones are closed once more than `max_sessions`
are open.
"""
import asyncio
import secrets
import time
from collections import OrderedDict
from typing import Callable

from hr_portal.core.config import BootstrapTimeouts
from hr_portal.core.logger import get_logger
from hr_portal.identity.provider import IdentityProvider
from hr_portal.identity.session_store import LocalSessionStore
from hr_portal.services.auth import AuthService
from hr_portal.services.bootstrap import SessionBootstrap, ViewState
from hr_portal.services.provisioning import AccountProvisioner
from hr_portal.store.base import RecordStore

logger = get_logger(__name__)


def new_session_id() -> str:
    return secrets.token_urlsafe(24)


class PortalSession:
    def __init__(self, session_id: str, provider: IdentityProvider, records: RecordStore, timeouts: BootstrapTimeouts):
        self.session_id = session_id
        self.sessions = LocalSessionStore(provider)
        self.auth = AuthService(self.sessions, records, AccountProvisioner(records), timeouts)
        self.bootstrap = SessionBootstrap(self.auth, self.sessions, timeouts)
        # one request at a time per browser session
        self.lock = asyncio.Lock()
        self.last_seen = 0.0
        self.closed = False

    @property
    def state(self) -> ViewState:
        return self.bootstrap.state

    @property
    def has_session(self) -> bool:
        return self.sessions.current is not None

    async def close(self) -> None:
        self.closed = True
        await self.bootstrap.close()
        self.sessions.close()


class PortalRegistry:
    def __init__(
        self,
        provider: IdentityProvider,
        records: RecordStore,
        timeouts: BootstrapTimeouts,
        idle_ttl: float = 1800.0,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._provider = provider
        self._records = records
        self._timeouts = timeouts
        self._idle_ttl = idle_ttl
        self._max_sessions = max_sessions
        self._clock = clock
        # least recently used first
        self._portals: OrderedDict[str, PortalSession] = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._portals)

    def find(self, session_id: str | None) -> PortalSession | None:
        return self._portals.get(session_id) if session_id else None

    def _touch(self, portal: PortalSession) -> None:
        portal.last_seen = self._clock()
        self._portals.move_to_end(portal.session_id)

    def _evict_idle(self) -> list[PortalSession]:
        cutoff = self._clock() - self._idle_ttl
        evicted = []
        while self._portals:
            oldest = next(iter(self._portals.values()))
            if oldest.last_seen > cutoff:
                break
            evicted.append(self._portals.popitem(last=False)[1])
        return evicted

    def _evict_overflow(self) -> list[PortalSession]:
        evicted = []
        while len(self._portals) > self._max_sessions:
            evicted.append(self._portals.popitem(last=False)[1])
        return evicted

    async def _close(self, portal: PortalSession) -> None:
        async with portal.lock:
            await portal.close()

    async def _close_evicted(self, portals: list[PortalSession], reason: str) -> None:
        if not portals:
            return
        await asyncio.gather(*(self._close(portal) for portal in portals))
        logger.info("Portal sessions evicted", extra={"count": len(portals), "reason": reason})

    async def get_or_create(self, session_id: str | None) -> PortalSession:
        """
        Kept portal for the cookie, or a freshly mounted one under a new id.

        A new portal is not kept until `release` sees that it holds a session.
        """
        async with self._lock:
            idle = self._evict_idle()
            portal = self.find(session_id)
            if portal is not None:
                self._touch(portal)
        await self._close_evicted(idle, "idle")
        if portal is not None:
            return portal

        portal = PortalSession(new_session_id(), self._provider, self._records, self._timeouts)
        async with portal.lock:
            await portal.bootstrap.mount()
        logger.info("Portal session opened", extra={"phase": portal.state.phase.value})
        return portal

    async def release(self, portal: PortalSession) -> None:
        """End of a request: keep a portal that holds a session, close one that does not."""
        if portal.closed:
            return
        if not portal.has_session:
            await self.discard(portal)
            return
        async with self._lock:
            self._portals[portal.session_id] = portal
            self._touch(portal)
            overflow = self._evict_overflow()
        await self._close_evicted(overflow, "capacity")

    async def discard(self, portal: PortalSession) -> None:
        async with self._lock:
            if self._portals.get(portal.session_id) is portal:
                del self._portals[portal.session_id]
        await self._close(portal)
        logger.debug("Portal session closed", extra={"phase": portal.state.phase.value})

    async def close(self) -> None:
        async with self._lock:
            portals, self._portals = list(self._portals.values()), OrderedDict()
        await asyncio.gather(*(portal.close() for portal in portals), return_exceptions=True)
        logger.info("Portal sessions closed", extra={"count": len(portals)})
