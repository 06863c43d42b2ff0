"""Capability interface for anything that emits executed query text."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

QueryCallback = Callable[[str], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class QueryEventSource(Protocol):
    def subscribe(self, callback: QueryCallback) -> Unsubscribe:
        """Call ``callback`` with each query's text until the handle is invoked."""
        ...
