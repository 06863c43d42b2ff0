"""Configuration value object and validation helpers for nplusone-control."""

from __future__ import annotations

import re
import traceback
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass, field, fields, replace
from numbers import Real
from typing import Any

from pydantic import ValidationError
from pydantic_settings import SettingsError

from .errors import ConfigError
from .models import GrowthPolicy, ScaleFactor
from .settings import DEFAULT_EVENT, DEFAULT_IGNORE, NPlusOneSettings, load_settings
from .table_stats import EXTRACT_TABLE_RE, LOOSE_TABLE_RE

PATTERN_FIELDS = {"ignore", "matching", "table_pattern"}

BacktraceCleaner = Callable[[list[traceback.FrameSummary]], Iterable[traceback.FrameSummary]]

_SETTINGS_FIELD_RE = re.compile(r'field "(\w+)"')


@dataclass(frozen=True)
class ControlConfig:
    """Everything one assertion needs besides the operation and the event source.

    Values are validated and normalised on construction: pattern strings are
    compiled, ``policy`` strings become ``GrowthPolicy`` members and scale
    factors become a tuple.
    """

    scale_factors: tuple[ScaleFactor, ...] = (2, 3)
    verbose: bool = False
    show_table_stats: bool = True
    ignore: re.Pattern[str] = field(default_factory=lambda: re.compile(DEFAULT_IGNORE))
    matching: re.Pattern[str] | None = None
    event: str = DEFAULT_EVENT
    policy: GrowthPolicy = GrowthPolicy.CONSTANT
    tolerance: int = 0
    slope: float = 1
    warmup: bool = False
    table_pattern: re.Pattern[str] = EXTRACT_TABLE_RE
    backtrace_cleaner: BacktraceCleaner | None = None  # verbose reports show cleaned call sites

    def __post_init__(self) -> None:
        for key, value in _normalized(self).items():
            object.__setattr__(self, key, value)

    def with_overrides(self, **changes: Any) -> ControlConfig:
        """Return a validated copy with ``changes`` applied as given."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration option(s): {', '.join(unknown)}.")
        if not changes:
            return self
        return replace(self, **changes)


def default_config(settings: NPlusOneSettings | None = None) -> ControlConfig:
    """Build the default configuration from NPLUSONE_* settings."""
    if settings is None:
        try:
            settings = load_settings()
        except ValidationError as exc:
            error = exc.errors()[0]
            key = ".".join(str(part) for part in error["loc"]) or "settings"
            raise ConfigError(f"Invalid value for '{key}': {error['msg']}.") from exc
        except SettingsError as exc:
            match = _SETTINGS_FIELD_RE.search(str(exc))
            key = match.group(1) if match else "settings"
            raise ConfigError(f"Invalid value for '{key}': {exc}.") from exc

    return ControlConfig(
        scale_factors=tuple(settings.scale_factors),
        verbose=settings.verbose,
        show_table_stats=settings.show_table_stats,
        ignore=settings.ignore,  # type: ignore[arg-type]
        event=settings.event,
        tolerance=settings.tolerance,
        warmup=settings.warmup,
        table_pattern=LOOSE_TABLE_RE if settings.loose_table_matching else EXTRACT_TABLE_RE,
    )


def config_to_dict(config: ControlConfig) -> dict[str, Any]:
    data = asdict(config)
    for key in PATTERN_FIELDS:
        if data[key] is not None:
            data[key] = data[key].pattern
    data["policy"] = config.policy.value
    if config.backtrace_cleaner is not None:
        data["backtrace_cleaner"] = getattr(
            config.backtrace_cleaner, "__qualname__", repr(config.backtrace_cleaner)
        )
    return data


def validate_scale_factors(scale_factors: Iterable[ScaleFactor]) -> tuple[ScaleFactor, ...]:
    """Check that a comparison is possible before any run executes."""
    if isinstance(scale_factors, (str, bytes)):
        raise ConfigError("Invalid value for 'scale_factors': expected a sequence, got a string.")
    try:
        values = tuple(scale_factors)
    except TypeError as exc:
        raise ConfigError(f"Invalid value for 'scale_factors': {exc}.") from exc

    if len(values) < 2:
        raise ConfigError(
            f"Invalid value for 'scale_factors': need at least two values to compare, got {len(values)}."
        )
    for index, value in enumerate(values):
        if _is_number(value) and value <= 0:
            raise ConfigError(
                f"Invalid value for 'scale_factors[{index}]': expected positive number, got {value}."
            )
        if value in values[:index]:
            raise ConfigError(f"Invalid value for 'scale_factors': duplicate scale factor {value!r}.")
    return values


def _normalized(config: ControlConfig) -> dict[str, Any]:
    values = {
        "scale_factors": validate_scale_factors(config.scale_factors),
        "verbose": _expect_bool(config.verbose, "verbose"),
        "show_table_stats": _expect_bool(config.show_table_stats, "show_table_stats"),
        "warmup": _expect_bool(config.warmup, "warmup"),
        "ignore": _expect_pattern(config.ignore, "ignore"),
        "matching": None if config.matching is None else _expect_pattern(config.matching, "matching"),
        "table_pattern": _expect_pattern(config.table_pattern, "table_pattern", flags=re.IGNORECASE),
        "event": _expect_non_empty_string(config.event, "event"),
        "policy": _expect_policy(config.policy),
        "tolerance": _expect_non_negative_int(config.tolerance, "tolerance"),
        "slope": _expect_non_negative_number(config.slope, "slope"),
        "backtrace_cleaner": _expect_optional_callable(config.backtrace_cleaner, "backtrace_cleaner"),
    }
    if values["policy"] == GrowthPolicy.LINEAR:
        _expect_numeric_scales(values["scale_factors"])
    return values


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _expect_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid value for '{key}': expected boolean true/false.")
    return value


def _expect_pattern(value: Any, key: str, flags: int = 0) -> re.Pattern[str]:
    if isinstance(value, re.Pattern):
        return value
    if not isinstance(value, str):
        raise ConfigError(f"Invalid value for '{key}': expected regular expression or string.")
    try:
        return re.compile(value, flags)
    except re.error as exc:
        raise ConfigError(f"Invalid value for '{key}': {exc}.") from exc


def _expect_non_empty_string(value: Any, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Invalid value for '{key}': expected non-empty string.")
    return value


def _expect_policy(value: Any) -> GrowthPolicy:
    try:
        return GrowthPolicy(value)
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in GrowthPolicy)
        raise ConfigError(f"Invalid value for 'policy': expected one of [{choices}].") from exc


def _expect_non_negative_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"Invalid value for '{key}': expected non-negative integer.")
    return value


def _expect_non_negative_number(value: Any, key: str) -> float:
    if not _is_number(value) or value < 0:
        raise ConfigError(f"Invalid value for '{key}': expected non-negative number.")
    return value


def _expect_optional_callable(value: Any, key: str) -> Any:
    if value is not None and not callable(value):
        raise ConfigError(f"Invalid value for '{key}': expected a callable or None.")
    return value


def _expect_numeric_scales(scale_factors: tuple[ScaleFactor, ...]) -> None:
    for index, value in enumerate(scale_factors):
        if not _is_number(value):
            raise ConfigError(
                f"Invalid value for 'scale_factors[{index}]': linear policy requires numbers, got {value!r}."
            )
