"""SQLAlchemy engine events as a query event source."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event

from ..errors import EventSourceError
from .base import QueryCallback, Unsubscribe

logger = logging.getLogger(__name__)

SUPPORTED_EVENTS = ("before_cursor_execute", "after_cursor_execute")


class SqlAlchemyEventSource:
    """Emits every statement a SQLAlchemy ``Engine`` (or ``Connection``) sends to its cursor."""

    def __init__(self, target: Any, event_name: str = "before_cursor_execute") -> None:
        if event_name not in SUPPORTED_EVENTS:
            choices = ", ".join(SUPPORTED_EVENTS)
            raise EventSourceError(
                f"Unsupported SQLAlchemy event '{event_name}': expected one of [{choices}]."
            )
        self.target = target
        self.event_name = event_name

    def subscribe(self, callback: QueryCallback) -> Unsubscribe:
        def _on_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            callback(statement)

        event.listen(self.target, self.event_name, _on_cursor_execute)
        logger.debug("Listening for %s on %r", self.event_name, self.target)
        removed = False

        def unsubscribe() -> None:
            nonlocal removed
            if removed:
                return
            event.remove(self.target, self.event_name, _on_cursor_execute)
            removed = True
            logger.debug("Stopped listening for %s on %r", self.event_name, self.target)

        return unsubscribe
