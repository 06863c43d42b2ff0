"""Pass/fail policy for query counts across scale factors.

The default policy is strict equality: every run must issue the same number
of queries, because batched loading should not depend on the record count.
``tolerance`` relaxes each policy by a fixed number of extra queries.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from numbers import Real

from .errors import ConfigError
from .models import ComparisonResult, GrowthPolicy, RunSet, ScaleFactor

logger = logging.getLogger(__name__)


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def policy_holds(
    policy: GrowthPolicy,
    scales: Sequence[ScaleFactor],
    counts: Sequence[int],
    tolerance: int = 0,
    slope: float = 1,
) -> bool:
    """Single predicate behind every growth policy."""
    if len(counts) < 2:
        return True
    numeric = all(_is_number(scale) for scale in scales)
    points = list(zip(scales, counts))
    if numeric:
        # Growth is judged from smaller to larger scale, whatever the run order.
        points.sort(key=lambda point: point[0])
    steps = list(zip(points, points[1:]))

    if policy == GrowthPolicy.CONSTANT:
        return max(counts) - min(counts) <= tolerance
    if policy == GrowthPolicy.NON_INCREASING:
        return all(after <= before + tolerance for (_, before), (_, after) in steps)
    if policy == GrowthPolicy.LINEAR:
        if not numeric:
            raise ConfigError("Linear growth policy requires numeric scale factors.")
        return all(
            after - before <= slope * (next_scale - scale) + tolerance
            for (scale, before), (next_scale, after) in steps
        )
    raise ConfigError(f"Unknown growth policy: {policy!r}.")


class Comparator:
    def __init__(
        self,
        policy: GrowthPolicy = GrowthPolicy.CONSTANT,
        tolerance: int = 0,
        slope: float = 1,
    ) -> None:
        self.policy = GrowthPolicy(policy)
        self.tolerance = tolerance
        self.slope = slope

    def evaluate(self, run_set: RunSet) -> ComparisonResult:
        passed = policy_holds(
            self.policy, run_set.scales, run_set.counts, self.tolerance, self.slope
        )
        if not passed:
            logger.info(
                "Query counts %s for scales %s violate %s policy",
                list(run_set.counts),
                list(run_set.scales),
                self.policy.value,
            )
        return ComparisonResult(passed=passed, run_set=run_set, policy=self.policy)
