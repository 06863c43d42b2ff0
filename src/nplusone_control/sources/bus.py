"""In-process notification bus with named channels.

Instrumentation that is not SQLAlchemy (a raw DB-API wrapper, another ORM,
test doubles) publishes each executed query on a channel; ``BusEventSource``
adapts one channel to the ``QueryEventSource`` interface.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .base import QueryCallback, Unsubscribe

logger = logging.getLogger(__name__)

PayloadCallback = Callable[[Any], None]


class EventBus:
    """Named-channel publish/subscribe registry."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[PayloadCallback]] = {}

    def subscribe(self, name: str, callback: PayloadCallback) -> Unsubscribe:
        self._subscribers.setdefault(name, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(name, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(name, None)

        return unsubscribe

    def publish(self, name: str, payload: Any) -> None:
        # Copy so callbacks may unsubscribe while being notified.
        for callback in list(self._subscribers.get(name, ())):
            callback(payload)

    def subscriber_count(self, name: str) -> int:
        return len(self._subscribers.get(name, ()))

    def source(self, name: str) -> BusEventSource:
        return BusEventSource(self, name)


def query_text(payload: Any) -> str | None:
    """Extract query text from a ``str`` payload or a mapping with ``"sql"``."""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, Mapping):
        value = payload.get("sql")
        if isinstance(value, str):
            return value
    return None


class BusEventSource:
    """One ``EventBus`` channel exposed as a query event source."""

    def __init__(self, bus: EventBus, name: str) -> None:
        self.bus = bus
        self.name = name

    def subscribe(self, callback: QueryCallback) -> Unsubscribe:
        def on_payload(payload: Any) -> None:
            text = query_text(payload)
            if text is None:
                logger.debug("Skipping %s payload without query text: %r", self.name, payload)
                return
            callback(text)

        logger.debug("Subscribing to bus channel %s", self.name)
        return self.bus.subscribe(self.name, on_payload)
