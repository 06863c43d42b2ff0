"""Detect N+1 queries by comparing query counts across dataset sizes."""

from .assertions import (
    NPlusOneControl,
    assert_constant_number_of_queries,
    assert_linear_number_of_queries,
    check_queries,
)
from .backtrace import drop_library_frames, format_frame
from .comparator import Comparator, policy_holds
from .config import ControlConfig, config_to_dict, default_config, validate_scale_factors
from .errors import ConfigError, EventSourceError, NPlusOneControlError
from .executor import ScaledExecutor
from .models import ComparisonResult, ExecutionRun, GrowthPolicy, RunSet, TableDelta
from .recorder import QueryRecorder
from .reporter import build_failure_message
from .settings import NPlusOneSettings
from .sources import BusEventSource, EventBus, QueryEventSource, SqlAlchemyEventSource, source_for
from .table_stats import UNCLASSIFIED_LABEL, diff_stats, summarize

__all__ = [
    "BusEventSource",
    "Comparator",
    "ComparisonResult",
    "ConfigError",
    "ControlConfig",
    "EventBus",
    "EventSourceError",
    "ExecutionRun",
    "GrowthPolicy",
    "NPlusOneControl",
    "NPlusOneControlError",
    "NPlusOneSettings",
    "QueryEventSource",
    "QueryRecorder",
    "RunSet",
    "ScaledExecutor",
    "SqlAlchemyEventSource",
    "TableDelta",
    "UNCLASSIFIED_LABEL",
    "assert_constant_number_of_queries",
    "assert_linear_number_of_queries",
    "build_failure_message",
    "check_queries",
    "drop_library_frames",
    "format_frame",
    "config_to_dict",
    "default_config",
    "diff_stats",
    "policy_holds",
    "source_for",
    "summarize",
    "validate_scale_factors",
]

__version__ = "0.1.0"
