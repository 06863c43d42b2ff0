"""Query event sources and the factory that picks one for a target."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import UnboundExecutionError
from sqlalchemy.orm import Session

from ..errors import EventSourceError
from .base import QueryCallback, QueryEventSource, Unsubscribe
from .bus import BusEventSource, EventBus, query_text
from .engine import SUPPORTED_EVENTS, SqlAlchemyEventSource


def source_for(target: Any, event_name: str) -> QueryEventSource:
    """Return a query event source for an engine, connection, session, bus or source."""
    if isinstance(target, EventBus):
        return target.source(event_name)
    if isinstance(target, (Engine, Connection)):
        return SqlAlchemyEventSource(target, event_name)
    if isinstance(target, Session):
        try:
            bind = target.get_bind()
        except UnboundExecutionError as exc:
            raise EventSourceError(
                "Cannot capture queries from a Session that is not bound to an engine."
            ) from exc
        return SqlAlchemyEventSource(bind, event_name)
    if isinstance(target, QueryEventSource):
        return target
    raise EventSourceError(
        f"Cannot capture queries from {type(target).__name__}; pass a SQLAlchemy "
        "Engine/Connection/Session, an EventBus, or an object with subscribe(callback)."
    )


__all__ = [
    "BusEventSource",
    "EventBus",
    "QueryCallback",
    "QueryEventSource",
    "SUPPORTED_EVENTS",
    "SqlAlchemyEventSource",
    "Unsubscribe",
    "query_text",
    "source_for",
]
