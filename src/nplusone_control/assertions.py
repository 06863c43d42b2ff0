"""Assertion surface: run an operation at several scales and judge its query counts.

``check_queries`` is the predicate-with-diagnostics the host test framework
binds to; the ``assert_*`` helpers raise ``AssertionError`` with the report.

Usage::

    def test_orders_are_batched(engine):
        def list_orders(scale):
            seed_orders(engine, scale)
            OrderService(engine).list_with_customers()

        assert_constant_number_of_queries(list_orders, source=engine)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from .comparator import Comparator
from .config import ControlConfig, default_config
from .executor import Operation, ScaledExecutor
from .models import ComparisonResult, GrowthPolicy, ScaleFactor
from .reporter import build_failure_message, expectation_header
from .sources import source_for


def check_queries(
    operation: Operation,
    *,
    source: Any,
    config: ControlConfig | None = None,
    scale_factors: Iterable[ScaleFactor] | None = None,
    populate: Operation | None = None,
    **overrides: Any,
) -> ComparisonResult:
    """Run ``operation`` once per scale factor and compare query counts.

    Args:
        operation: Unary callable receiving the scale factor.
        source: SQLAlchemy Engine/Connection/Session, ``EventBus``, or any
            ``QueryEventSource``.
        config: Base configuration; defaults to ``default_config()``.
        scale_factors: Per-call scale factors.
        populate: Optional unrecorded setup hook called with each scale
            factor before its run.
        **overrides: Any other ``ControlConfig`` field (``policy``,
            ``tolerance``, ``ignore``, ``matching``, ``verbose`` ...).
            ``None`` leaves the configured value in place; use
            ``config.with_overrides(matching=None)`` to clear a pattern.

    Returns:
        A :class:`ComparisonResult`; ``message`` holds the report on failure.
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if scale_factors is not None:
        changes["scale_factors"] = scale_factors
    config = (config or default_config()).with_overrides(**changes)
    executor = ScaledExecutor(source_for(source, config.event), config)
    run_set = executor.run(operation, populate=populate)

    result = Comparator(config.policy, config.tolerance, config.slope).evaluate(run_set)
    if result.passed:
        return result

    message = build_failure_message(
        run_set,
        verbose=config.verbose,
        show_table_stats=config.show_table_stats,
        header=expectation_header(config.policy, config.tolerance, config.slope),
        table_pattern=config.table_pattern,
    )
    return replace(result, message=message)


def assert_constant_number_of_queries(operation: Operation, *, source: Any, **kwargs: Any) -> ComparisonResult:
    result = check_queries(operation, source=source, policy=GrowthPolicy.CONSTANT, **kwargs)
    if not result.passed:
        raise AssertionError(result.message)
    return result


def assert_linear_number_of_queries(
    operation: Operation, *, source: Any, slope: float = 1, **kwargs: Any
) -> ComparisonResult:
    result = check_queries(operation, source=source, policy=GrowthPolicy.LINEAR, slope=slope, **kwargs)
    if not result.passed:
        raise AssertionError(result.message)
    return result


class NPlusOneControl:
    """Binds a query source and a base configuration for repeated assertions."""

    def __init__(self, source: Any, config: ControlConfig | None = None) -> None:
        self.source = source
        self.config = config or default_config()

    def configure(self, **overrides: Any) -> NPlusOneControl:
        return NPlusOneControl(self.source, self.config.with_overrides(**overrides))

    def check(self, operation: Operation, **kwargs: Any) -> ComparisonResult:
        return check_queries(operation, source=self.source, config=self.config, **kwargs)

    def assert_constant(self, operation: Operation, **kwargs: Any) -> ComparisonResult:
        return assert_constant_number_of_queries(
            operation, source=self.source, config=self.config, **kwargs
        )

    def assert_linear(self, operation: Operation, slope: float = 1, **kwargs: Any) -> ComparisonResult:
        return assert_linear_number_of_queries(
            operation, source=self.source, config=self.config, slope=slope, **kwargs
        )
