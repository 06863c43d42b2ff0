"""Per-table query statistics for failure reports.

This is a heuristic, not a SQL parser. Each query is searched for the first
``insert into`` / ``update`` / ``delete from`` / ``from`` clause followed by a
quoted identifier. Subqueries and multi-table statements are attributed to
whichever clause appears first, and backtick-quoted identifiers are not
recognised. Queries that match nothing are still counted, under
``UNCLASSIFIED_LABEL``, so label totals always equal the run total.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Mapping

from .models import TableDelta

# Clause keyword followed by a single- or double-quoted table name.
EXTRACT_TABLE_RE = re.compile(r"(insert into|update|delete from|from) ['\"]([^'\"\s]+)['\"]", re.IGNORECASE)

# Same clauses, quotes optional (SQLAlchemy only quotes names that need it).
LOOSE_TABLE_RE = re.compile(
    r"\b(insert into|update|delete from|from) ['\"]?([\w.$]+)['\"]?", re.IGNORECASE
)

QUERY_PART_TO_TYPE = {
    "insert into": "INSERT",
    "update": "UPDATE",
    "delete from": "DELETE",
    "from": "SELECT",
}

UNCLASSIFIED_LABEL = "(unclassified)"


def classify(query: str, pattern: re.Pattern[str] = EXTRACT_TABLE_RE) -> str:
    """Return the ``"table (OPERATION)"`` label for one query."""
    match = pattern.search(query)
    if not match:
        return UNCLASSIFIED_LABEL
    kind = QUERY_PART_TO_TYPE[" ".join(match.group(1).lower().split())]
    return f"{match.group(2)} ({kind})"


def summarize(queries: Iterable[str], pattern: re.Pattern[str] = EXTRACT_TABLE_RE) -> dict[str, int]:
    """Count queries per label, in first-seen order."""
    return dict(Counter(classify(query, pattern) for query in queries))


def diff_stats(before: Mapping[str, int], after: Mapping[str, int]) -> list[TableDelta]:
    """Labels whose counts differ; a label missing on one side counts as zero."""
    labels = list(before) + [label for label in after if label not in before]
    deltas = []
    for label in labels:
        old, new = before.get(label, 0), after.get(label, 0)
        if old != new:
            deltas.append(TableDelta(label=label, before=old, after=new))
    return deltas
