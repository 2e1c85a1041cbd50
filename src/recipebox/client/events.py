"""User interaction events the session monitor listens to."""

from collections import defaultdict
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

EventCallback = Callable[[str], None]


class InteractionEvent(StrEnum):
    MOUSEDOWN = "mousedown"
    KEYDOWN = "keydown"
    SCROLL = "scroll"
    TOUCHSTART = "touchstart"
    CLICK = "click"


TRACKED_EVENTS: tuple[InteractionEvent, ...] = tuple(InteractionEvent)


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class EventSource(Protocol):
    def subscribe(self, kind: str, callback: EventCallback) -> Cancellable: ...


class Subscription:
    """Handle for one registered listener. Cancelling twice is a no-op."""

    def __init__(self, bus: "EventBus", kind: str, callback: EventCallback) -> None:
        self._bus = bus
        self.kind = kind
        self._callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._bus._remove(self.kind, self._callback)  # noqa: SLF001


class EventBus:
    """In-process dispatcher for interaction events.

    The UI layer calls `emit` for each raw event it sees.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[EventCallback]] = defaultdict(list)

    def subscribe(self, kind: str, callback: EventCallback) -> Subscription:
        self._listeners[kind].append(callback)
        return Subscription(self, kind, callback)

    def emit(self, kind: str) -> None:
        # Copy, a listener may unsubscribe while we iterate
        for callback in list(self._listeners.get(kind, ())):
            callback(kind)

    def listener_count(self, kind: str | None = None) -> int:
        if kind is not None:
            return len(self._listeners.get(kind, ()))
        return sum(len(callbacks) for callbacks in self._listeners.values())

    def _remove(self, kind: str, callback: EventCallback) -> None:
        callbacks = self._listeners.get(kind)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)
