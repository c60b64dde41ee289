from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    STOP = "STOP"
    RESET = "RESET"


Subscriber = Callable[[], None]


class EventBus:
    """Per-port channel that tells in-process listeners about STOP and RESET."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[EventType, list[Subscriber]] = {}

    def subscribe(self, callback: Subscriber, *event_types: EventType) -> None:
        with self._lock:
            for event_type in event_types or tuple(EventType):
                self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            for callbacks in self._subscribers.values():
                while callback in callbacks:
                    callbacks.remove(callback)

    def publish(self, event_type: EventType) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(event_type, ()))
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Subscriber %r failed while handling %s event", callback, event_type.value)


class EventBusRegistry:
    """Maps a MockServer port to its ``EventBus``; at most one bus per port."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buses: dict[int, EventBus] = {}

    def get(self, port: int) -> EventBus:
        with self._lock:
            bus = self._buses.get(port)
            if bus is None:
                bus = EventBus()
                self._buses[port] = bus
            return bus

    def remove(self, port: int) -> EventBus | None:
        with self._lock:
            return self._buses.pop(port, None)

    def publish(self, port: int, event_type: EventType) -> None:
        self.get(port).publish(event_type)

    def __contains__(self, port: object) -> bool:
        with self._lock:
            return port in self._buses

    def __len__(self) -> int:
        with self._lock:
            return len(self._buses)


DEFAULT_REGISTRY = EventBusRegistry()
