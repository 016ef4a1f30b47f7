"""
Session bootstrap.

Owns the single ViewState a portal session renders from. It is built once
on mount (existing session → load user) and then kept current from the auth
event channel:

    INIT -> LOADING -> AUTHENTICATED | UNAUTHENTICATED

Every load runs as a task tagged with a generation number. Anything that
supersedes it (sign-out, the mount ceiling, close) bumps the generation and
cancels the task, and writes from a stale generation are dropped, so a slow
load can never flip the view back to authenticated after the login screen
has been shown.
"""
import asyncio
from dataclasses import dataclass, replace
from enum import Enum

from hr_portal.core.config import BootstrapTimeouts
from hr_portal.core.errors import ErrorKind, Notice, PortalError, classify
from hr_portal.core.logger import get_logger
from hr_portal.core.timeouts import with_timeout
from hr_portal.identity.base import AuthEvent, AuthEventType, AuthSession, SessionStore
from hr_portal.identity.channel import AuthEventChannel
from hr_portal.services.auth import AuthService, CurrentUser

logger = get_logger(__name__)

SLOW_CONNECTION_MESSAGE = "Loading user data is taking too long. Please check your connection and try again."
LOAD_FAILED_MESSAGE = "Failed to load user data. Please try logging in again."
SIGNED_OUT_MESSAGE = "Logged out successfully"
SIGN_OUT_FAILED_MESSAGE = "Error logging out"


class Phase(str, Enum):
    INIT = "INIT"
    LOADING = "LOADING"
    AUTHENTICATED = "AUTHENTICATED"
    UNAUTHENTICATED = "UNAUTHENTICATED"


@dataclass(frozen=True)
class ViewState:
    phase: Phase = Phase.INIT
    current_user: CurrentUser | None = None
    role: str = "employee"  # hr | employee
    notice: Notice | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.phase is Phase.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.phase in (Phase.INIT, Phase.LOADING)


class SessionBootstrap:
    def __init__(self, auth: AuthService, sessions: SessionStore, timeouts: BootstrapTimeouts | None = None):
        self._auth = auth
        self._sessions = sessions
        self._timeouts = timeouts or BootstrapTimeouts()

        self._state = ViewState()
        # read by the SIGNED_IN guard; always updated in the same step as _state
        self._authenticated = False
        self._generation = 0

        self._load_task: asyncio.Task | None = None
        self._channel: AuthEventChannel | None = None
        self._listener: asyncio.Task | None = None
        self._mounted = False

    @property
    def state(self) -> ViewState:
        return self._state

    async def __aenter__(self) -> "SessionBootstrap":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # state bookkeeping

    def _set_state(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        self._authenticated = self._state.phase is Phase.AUTHENTICATED

    def _supersede(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _apply(self, generation: int, **changes) -> None:
        if self._is_current(generation):
            self._set_state(**changes)
        else:
            logger.debug("Dropping superseded view-state write", extra={"generation": generation})

    def _unauthenticated(self, generation: int, notice: Notice | None = None) -> None:
        changes = {"phase": Phase.UNAUTHENTICATED, "current_user": None, "role": "employee"}
        if notice is not None:
            changes["notice"] = notice
        self._apply(generation, **changes)

    def _loading_in_flight(self) -> bool:
        return self._load_task is not None and not self._load_task.done()

    def _track(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._load_task = task
        task.add_done_callback(self._load_done)
        return task

    def _load_done(self, task: asyncio.Task) -> None:
        if self._load_task is task:
            self._load_task = None
        if not task.cancelled() and task.exception() is not None:
            logger.error("Load task crashed", exc_info=task.exception())

    def _cancel_load(self) -> None:
        task = self._load_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # mount / close

    async def mount(self) -> ViewState:
        """
        Initial check, bounded by the mount ceiling.

        When the ceiling fires first the initial load is cancelled and the
        login screen is shown with a slow-connection warning.
        """
        if self._mounted:
            return self._state
        self._mounted = True

        self._set_state(phase=Phase.LOADING)
        self._channel = self._sessions.subscribe()
        self._listener = asyncio.create_task(self._listen(self._channel))

        generation = self._supersede()
        initial = self._track(self._initial_check(generation))
        done, _ = await asyncio.wait({initial}, timeout=self._timeouts.mount_ceiling)
        if not done:
            logger.warning("Mount ceiling reached, showing login", extra={"seconds": self._timeouts.mount_ceiling})
            ceiling = self._supersede()
            initial.cancel()
            self._unauthenticated(ceiling, Notice("warning", SLOW_CONNECTION_MESSAGE))
            await asyncio.gather(initial, return_exceptions=True)
        return self._state

    async def _initial_check(self, generation: int) -> None:
        try:
            session = await self._sessions.get_session()
        except Exception as exc:
            logger.warning("Session check failed", exc_info=exc, extra={"kind": classify(exc).value})
            self._unauthenticated(generation)
            return

        if session is None:
            logger.info("No existing session")
            self._unauthenticated(generation)
            return
        await self._load_user(generation)

    async def close(self) -> None:
        """Release the event channel and stop every task this bootstrap started."""
        self._supersede()
        tasks = [t for t in (self._load_task, self._listener) if t is not None and not t.done()]
        if self._channel is not None:
            self._channel.close()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # load user

    async def _load_user(self, generation: int) -> None:
        try:
            user = await with_timeout(self._auth.get_current_user(), self._timeouts.load_user, "load user")
        except Exception as exc:
            await self._load_failed(generation, exc)
        else:
            if user is None:
                if not self._is_current(generation):
                    return
                logger.warning("Authenticated identity has no resolvable profile, signing out")
                # state first: the sign-out below emits SIGNED_OUT
                self._unauthenticated(generation, Notice("error", LOAD_FAILED_MESSAGE))
                await self._sign_out_after_failure()
            else:
                logger.info("User loaded", extra={"user_id": str(user.user_id), "role": user.role})
                self._apply(
                    generation,
                    phase=Phase.AUTHENTICATED,
                    current_user=user,
                    role=user.portal_role,
                    notice=None,
                )
        finally:
            # never leave the view spinning, whatever happened above
            if self._is_current(generation) and self._state.is_loading:
                self._set_state(phase=Phase.UNAUTHENTICATED)

    async def _load_failed(self, generation: int, exc: Exception) -> None:
        kind = classify(exc)
        error_id = getattr(exc, "error_id", None)
        if not self._is_current(generation):
            logger.debug("Superseded load failed", extra={"kind": kind.value})
            return

        if kind is ErrorKind.TIMEOUT:
            # slow connection: keep the session so the user can retry
            logger.warning("Timed out loading user data", extra={"error_id": error_id})
            self._unauthenticated(generation, Notice("warning", SLOW_CONNECTION_MESSAGE, error_id))
            return

        if kind in (
            ErrorKind.TRANSIENT_STORE,
            ErrorKind.STORE_REJECTED,
            ErrorKind.PROVISIONING_FAILURE,
            ErrorKind.NOT_FOUND,
            ErrorKind.AUTHENTICATION,
        ):
            logger.error("Failed to load user data", exc_info=exc, extra={"kind": kind.value, "error_id": error_id})
            self._unauthenticated(generation, Notice("error", LOAD_FAILED_MESSAGE, error_id))
            await self._sign_out_after_failure()

    async def _sign_out_after_failure(self) -> None:
        try:
            await self._auth.sign_out()
        except Exception:
            logger.exception("Sign-out after failed load also failed")

    # events

    async def _listen(self, channel: AuthEventChannel) -> None:
        async for event in channel:
            try:
                await self.handle_event(event)
            except Exception:
                logger.exception("Auth event handling failed", extra={"event": event.type.value})
            finally:
                channel.task_done()

    async def _is_live(self, session: AuthSession | None) -> bool:
        if session is None:
            return False
        current = await self._sessions.get_session()
        return current is not None and current.access_token == session.access_token

    async def handle_event(self, event: AuthEvent) -> None:
        if event.type is AuthEventType.SIGNED_IN:
            if self._authenticated or self._loading_in_flight():
                logger.debug("Ignoring SIGNED_IN, already authenticated or loading")
                return
            if not await self._is_live(event.session):
                logger.debug("Ignoring SIGNED_IN for a session that is no longer current")
                return
            if self._authenticated or self._loading_in_flight():
                return
            generation = self._supersede()
            self._set_state(phase=Phase.LOADING, notice=None)
            self._track(self._load_user(generation))

        elif event.type is AuthEventType.SIGNED_OUT:
            generation = self._supersede()
            self._cancel_load()
            self._unauthenticated(generation)

        elif event.type is AuthEventType.TOKEN_REFRESHED:
            # the loaded profile is still valid
            pass

    # user actions

    async def settle(self) -> ViewState:
        """Wait until queued events are handled and no load is running."""
        while True:
            if self._channel is not None and not self._channel.closed and self._listener is not None and not self._listener.done():
                await self._channel.join()
            task = self._load_task
            if task is None or task.done():
                return self._state
            await asyncio.wait({task})

    async def sign_in(self, email: str, password: str) -> ViewState:
        try:
            await self._auth.sign_in(email, password)
        except PortalError as exc:
            await self.settle()
            self._set_state(notice=Notice("error", exc.user_message, exc.error_id))
            raise
        return await self.settle()

    async def sign_out(self) -> ViewState:
        try:
            await self._auth.sign_out()
        except PortalError as exc:
            self._set_state(notice=Notice("error", SIGN_OUT_FAILED_MESSAGE, exc.error_id))
            raise
        await self.settle()
        self._set_state(notice=Notice("info", SIGNED_OUT_MESSAGE))
        return self._state
