"""Repeating timers for the session monitor."""

import asyncio
from collections.abc import Callable
from typing import Protocol

from recipebox.client.events import Cancellable


class Scheduler(Protocol):
    def call_every(self, interval: float, callback: Callable[[], None]) -> Cancellable: ...


class RepeatingTimer:
    """Calls `callback` every `interval` seconds on an asyncio loop until cancelled.

    `cancel()` takes effect immediately: a pending tick never runs after it returns.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self.cancelled = False
        self._schedule()

    def cancel(self) -> None:
        self.cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self.cancelled:
            return
        try:
            self._callback()
        finally:
            # The callback itself may have cancelled us
            if not self.cancelled:
                self._schedule()


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> RepeatingTimer:
        loop = self._loop or asyncio.get_running_loop()
        return RepeatingTimer(loop, interval, callback)
