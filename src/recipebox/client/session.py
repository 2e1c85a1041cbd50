"""Client-side session state and inactivity logout.

The monitor has two states. While `AUTHENTICATED` it listens to user
interaction events and runs a periodic check; once the user has been idle for
INACTIVITY_TIMEOUT it logs out on its own. Server-side token expiry still
applies independently, the monitor can only end a session sooner.
"""

from collections.abc import Callable
from datetime import timedelta
from enum import StrEnum
from types import TracebackType

import structlog

from recipebox.client.events import TRACKED_EVENTS, Cancellable, EventSource
from recipebox.client.scheduling import Scheduler
from recipebox.client.storage import LAST_ACTIVITY_KEY, SESSION_KEYS, TOKEN_KEY, USERNAME_KEY, LocalStorage
from recipebox.config import CHECK_INTERVAL, INACTIVITY_TIMEOUT
from recipebox.utils import now_ms

logger = structlog.get_logger(__name__)

INACTIVITY_NOTICE = "You have been logged out due to 24 hours of inactivity."


class SessionState(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class LogoutReason(StrEnum):
    MANUAL = "manual"
    UNAUTHORIZED = "unauthorized"  # Server answered 401
    INACTIVITY = "inactivity"


class MonitoringScope:
    """Owns the listeners and the periodic check of one authenticated period."""

    def __init__(self) -> None:
        self._handles: list[Cancellable] = []
        self.closed = False

    def add(self, handle: Cancellable) -> None:
        if self.closed:
            handle.cancel()
            return
        self._handles.append(handle)

    def close(self) -> None:
        """Cancel every handle. Safe to call more than once."""
        self.closed = True
        while self._handles:
            self._handles.pop().cancel()

    def __enter__(self) -> "MonitoringScope":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class SessionActivityMonitor:
    """Tracks the client's login session and logs out after a period of inactivity."""

    def __init__(
        self,
        storage: LocalStorage,
        events: EventSource,
        scheduler: Scheduler,
        *,
        clock: Callable[[], int] = now_ms,
        on_logout: Callable[[LogoutReason], None] | None = None,
        inactivity_timeout: timedelta = INACTIVITY_TIMEOUT,
        check_interval: timedelta = CHECK_INTERVAL,
    ) -> None:
        self._storage = storage
        self._events = events
        self._scheduler = scheduler
        self._clock = clock
        self._on_logout = on_logout
        self._timeout_ms = int(inactivity_timeout.total_seconds() * 1000)
        self._interval = check_interval.total_seconds()
        self._interval_ms = int(self._interval * 1000)
        self._state = SessionState.UNAUTHENTICATED
        self._scope: MonitoringScope | None = None
        self._last_stamp: int | None = None
        self.notice: str | None = None

        # A timestamp left over without a token belongs to an old session
        if storage.get_item(TOKEN_KEY) is None:
            storage.remove_item(LAST_ACTIVITY_KEY)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def token(self) -> str | None:
        return self._storage.get_item(TOKEN_KEY)

    @property
    def username(self) -> str | None:
        return self._storage.get_item(USERNAME_KEY)

    @property
    def last_activity(self) -> int | None:
        """Persisted last activity time in epoch ms, None if absent or unreadable."""
        raw = self._storage.get_item(LAST_ACTIVITY_KEY)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def restore(self) -> bool:
        """Resume a session from a token kept in storage.

        Returns True if the session is authenticated afterwards. A restored
        session that has already been idle too long is logged out at once.
        """
        if self.is_authenticated:
            return True
        if not self.token:
            self._storage.remove_items(SESSION_KEYS)
            return False
        self._enter_authenticated(restored=True)
        return self.is_authenticated

    def login(self, token: str, username: str) -> None:
        """Store a freshly issued token and start monitoring."""
        self._close_scope()
        self._storage.set_item(TOKEN_KEY, token)
        self._storage.set_item(USERNAME_KEY, username)
        self.notice = None
        self._enter_authenticated(restored=False)

    def logout(self, reason: LogoutReason = LogoutReason.MANUAL) -> None:
        """End the session: stop monitoring, then clear all persisted session keys."""
        was_authenticated = self.is_authenticated
        self._close_scope()
        self._state = SessionState.UNAUTHENTICATED
        self._last_stamp = None
        self._storage.remove_items(SESSION_KEYS)

        if not was_authenticated:
            return

        if reason is LogoutReason.INACTIVITY:
            self.notice = INACTIVITY_NOTICE
        logger.info("client_logged_out", reason=reason)
        if self._on_logout is not None:
            self._on_logout(reason)

    def shutdown(self) -> None:
        """Stop monitoring without logging out, the stored session can be restored later."""
        self._close_scope()
        self._state = SessionState.UNAUTHENTICATED
        self._last_stamp = None

    def __enter__(self) -> "SessionActivityMonitor":
        self.restore()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()

    def record_activity(self) -> None:
        """Stamp the last activity time, at most once per check interval."""
        if not self.is_authenticated:
            return
        now = self._clock()
        if self._last_stamp is not None and now - self._last_stamp < self._interval_ms:
            return
        self._stamp(now)

    def check_inactivity(self) -> bool:
        """Log out if idle for too long. Returns True while still authenticated."""
        if not self.is_authenticated:
            return False

        last_activity = self.last_activity
        if last_activity is None:
            self._stamp(self._clock())
            return True

        if self._clock() - last_activity >= self._timeout_ms:
            logger.info("client_inactivity_timeout", idle_ms=self._clock() - last_activity)
            self.logout(LogoutReason.INACTIVITY)
            return False
        return True

    def _enter_authenticated(self, restored: bool) -> None:
        self._state = SessionState.AUTHENTICATED

        previous = self.last_activity if restored else None
        if previous is None:
            self._stamp(self._clock())
        else:
            self._last_stamp = previous

        scope = MonitoringScope()
        for kind in TRACKED_EVENTS:
            scope.add(self._events.subscribe(kind, self._on_interaction))
        scope.add(self._scheduler.call_every(self._interval, self._on_tick))
        self._scope = scope

        self.check_inactivity()

    def _close_scope(self) -> None:
        if self._scope is not None:
            self._scope.close()
            self._scope = None

    def _stamp(self, now: int) -> None:
        self._last_stamp = now
        self._storage.set_item(LAST_ACTIVITY_KEY, str(now))

    def _on_interaction(self, _kind: str) -> None:
        self.record_activity()

    def _on_tick(self) -> None:
        self.check_inactivity()
