"""Capture the queries one operation emits.

Hooks a ``QueryEventSource`` for exactly the duration of the operation and
collects statement text in emission order, minus administrative statements.

Usage::

    recorder = QueryRecorder(SqlAlchemyEventSource(engine))
    queries = recorder.record(lambda: repo.list_orders())
"""

from __future__ import annotations

import logging
import re
import traceback
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from .backtrace import format_frame
from .settings import DEFAULT_IGNORE
from .sources.base import QueryEventSource

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_RE = re.compile(DEFAULT_IGNORE)


class QueryRecorder:
    def __init__(
        self,
        source: QueryEventSource,
        ignore: re.Pattern[str] | None = DEFAULT_IGNORE_RE,
        matching: re.Pattern[str] | None = None,
        backtrace_cleaner: Callable[[list[traceback.FrameSummary]], Iterable[traceback.FrameSummary]]
        | None = None,
    ) -> None:
        self.source = source
        self.ignore = ignore
        self.matching = matching
        self.backtrace_cleaner = backtrace_cleaner

    def accepts(self, query: str) -> bool:
        if self.ignore is not None and self.ignore.search(query):
            return False
        if self.matching is not None and not self.matching.search(query):
            return False
        return True

    def _backtrace(self) -> tuple[str, ...]:
        # Drop this method and the subscription callback.
        frames = traceback.extract_stack()[:-2]
        if self.backtrace_cleaner is not None:
            frames = self.backtrace_cleaner(list(frames))
        return tuple(format_frame(frame) for frame in frames)

    @contextmanager
    def capture(self, backtraces: list[tuple[str, ...]] | None = None) -> Iterator[list[str]]:
        """Yield a list that fills with accepted queries until the block exits.

        When ``backtraces`` is given, the call site of every accepted query is
        appended to it, index-aligned with the queries.
        """
        queries: list[str] = []

        def on_query(query: str) -> None:
            if not self.accepts(query):
                logger.debug("Ignoring query: %s", query)
                return
            queries.append(query)
            if backtraces is not None:
                backtraces.append(self._backtrace())

        unsubscribe = self.source.subscribe(on_query)
        try:
            yield queries
        finally:
            unsubscribe()

    def record(self, operation: Callable[[], Any]) -> tuple[str, ...]:
        """Run ``operation`` once and return the queries it emitted."""
        with self.capture() as queries:
            operation()
        return tuple(queries)

    def record_traced(
        self, operation: Callable[[], Any]
    ) -> tuple[tuple[str, ...], tuple[tuple[str, ...], ...]]:
        """Like ``record`` but also return each query's formatted call site."""
        backtraces: list[tuple[str, ...]] = []
        with self.capture(backtraces) as queries:
            operation()
        return tuple(queries), tuple(backtraces)
