"""Failure messages for query count comparisons."""

from __future__ import annotations

import re

from .models import GrowthPolicy, RunSet
from .table_stats import EXTRACT_TABLE_RE, diff_stats, summarize

HEADERS = {
    GrowthPolicy.CONSTANT: "Expected to make the same number of queries",
    GrowthPolicy.NON_INCREASING: "Expected the number of queries not to grow",
    GrowthPolicy.LINEAR: "Expected to make linear number of queries",
}


def expectation_header(policy: GrowthPolicy = GrowthPolicy.CONSTANT, tolerance: int = 0, slope: float = 1) -> str:
    text = HEADERS[GrowthPolicy(policy)]
    if policy == GrowthPolicy.LINEAR:
        text += f" (slope {slope})"
    if tolerance:
        text += f" (tolerance {tolerance})"
    return f"{text}, but got:\n"


def table_usage_stats(run_set: RunSet, pattern: re.Pattern[str] = EXTRACT_TABLE_RE) -> list[str]:
    """Lines describing per-table differences between the first and last run."""
    before = summarize(run_set.first.queries, pattern)
    after = summarize(run_set.last.queries, pattern)
    lines = ["Unmatched query numbers by tables:\n"]
    for delta in diff_stats(before, after):
        lines.append(f"  {delta.label}: {delta.before} != {delta.after}\n")
    return lines


def build_failure_message(
    run_set: RunSet,
    *,
    verbose: bool = False,
    show_table_stats: bool = True,
    header: str | None = None,
    table_pattern: re.Pattern[str] = EXTRACT_TABLE_RE,
) -> str:
    lines = [header or expectation_header()]
    for run in run_set:
        lines.append(f"  {run.count} for N={run.scale}\n")

    if show_table_stats:
        lines.extend(table_usage_stats(run_set, table_pattern))

    if verbose:
        for run in run_set:
            lines.append(f"Queries for N={run.scale}\n")
            for index, query in enumerate(run.queries):
                lines.append(f"  {query}\n")
                if index < len(run.backtraces):
                    lines.extend(f"    ↳ {frame}\n" for frame in run.backtraces[index])

    return "".join(lines)
