"""Run an operation once per scale factor, recording each run's queries."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from .config import ControlConfig, default_config, validate_scale_factors
from .models import ExecutionRun, RunSet, ScaleFactor
from .recorder import QueryRecorder
from .sources.base import QueryEventSource

logger = logging.getLogger(__name__)

Operation = Callable[[ScaleFactor], Any]


class ScaledExecutor:
    """Sequentially executes ``operation(scale)`` for each scale factor.

    Runs never overlap: they share one instrumentation channel and usually
    one database, so each must start from a deterministic state. Errors from
    ``populate``, the warmup, or the operation propagate immediately and no
    partial RunSet is returned.
    """

    def __init__(self, source: QueryEventSource, config: ControlConfig | None = None) -> None:
        self.source = source
        self.config = config or default_config()

    def run(
        self,
        operation: Operation,
        scale_factors: Iterable[ScaleFactor] | None = None,
        *,
        populate: Operation | None = None,
        warmup: bool | None = None,
    ) -> RunSet:
        scales = validate_scale_factors(
            self.config.scale_factors if scale_factors is None else scale_factors
        )
        recorder = QueryRecorder(
            self.source,
            ignore=self.config.ignore,
            matching=self.config.matching,
            backtrace_cleaner=self.config.backtrace_cleaner,
        )
        traced = self.config.verbose and self.config.backtrace_cleaner is not None
        warmup = self.config.warmup if warmup is None else warmup

        if warmup:
            logger.debug("Warming up with N=%s", scales[0])
            if populate is not None:
                populate(scales[0])
            operation(scales[0])

        runs = []
        for scale in scales:
            if populate is not None:
                populate(scale)
            if traced:
                queries, backtraces = recorder.record_traced(lambda: operation(scale))
            else:
                queries, backtraces = recorder.record(lambda: operation(scale)), ()
            logger.debug("Recorded %d queries for N=%s", len(queries), scale)
            runs.append(ExecutionRun(scale=scale, queries=queries, backtraces=backtraces))
        return RunSet(runs=tuple(runs))
