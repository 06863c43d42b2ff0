"""Value objects shared across the recorder, executor, comparator and reporter."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

ScaleFactor = Any  # usually a positive int; opaque values are passed through


class GrowthPolicy(str, Enum):
    CONSTANT = "constant"
    NON_INCREASING = "non_increasing"
    LINEAR = "linear"


@dataclass(frozen=True)
class ExecutionRun:
    """One execution of the measured operation at a single scale factor."""

    scale: ScaleFactor
    queries: tuple[str, ...] = ()
    backtraces: tuple[tuple[str, ...], ...] = ()  # per query, only when traced

    @property
    def count(self) -> int:
        return len(self.queries)


@dataclass(frozen=True)
class RunSet:
    """All runs produced for one assertion, in caller-supplied scale order."""

    runs: tuple[ExecutionRun, ...]

    def __iter__(self) -> Iterator[ExecutionRun]:
        return iter(self.runs)

    def __len__(self) -> int:
        return len(self.runs)

    def __getitem__(self, index: int) -> ExecutionRun:
        return self.runs[index]

    @property
    def scales(self) -> tuple[ScaleFactor, ...]:
        return tuple(run.scale for run in self.runs)

    @property
    def counts(self) -> tuple[int, ...]:
        return tuple(run.count for run in self.runs)

    @property
    def first(self) -> ExecutionRun:
        return self.runs[0]

    @property
    def last(self) -> ExecutionRun:
        return self.runs[-1]


@dataclass(frozen=True)
class TableDelta:
    label: str
    before: int
    after: int


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of comparing a RunSet against a growth policy."""

    passed: bool
    run_set: RunSet
    policy: GrowthPolicy
    message: str = ""  # empty if passed

    def __bool__(self) -> bool:
        return self.passed
