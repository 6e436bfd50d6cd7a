"""
Predicate-driven interval search along curves.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from arcpath.utils.config import config_manager
from arcpath.utils.logger import get_logger, timed
from arcpath.trajectory.bases import densify

logger = get_logger("algorithms.intervals")


@dataclass(frozen=True)
class Interval:
    """Closed arc-length range ``[start, end]``."""
    start: float
    end: float

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Interval end {self.end} precedes start {self.start}")

    @property
    def length(self) -> float:
        return self.end - self.start

    def contains(self, s: float) -> bool:
        return self.start <= s <= self.end


@timed("find_intervals")
def find_intervals(curve, predicate: Callable[[Any], bool],
                   min_points: Optional[int] = None) -> List[Interval]:
    """
    Maximal arc-length ranges whose sampled points satisfy a predicate.

    The predicate receives the external point created at each sample. A run
    of consecutive satisfying samples becomes one interval from its first to
    its last sample, so a single isolated sample yields a zero-length one.

    Args:
        curve: Curve to scan
        predicate: Test on external points
        min_points: Minimum number of samples (configured default when omitted)

    Returns:
        List[Interval]: Intervals in ascending order
    """
    if min_points is None:
        min_points = config_manager.get("queries", "interval_min_points", 0)

    intervals = []
    run_start = None
    previous = None

    for s in densify(curve.bases, min_points):
        s = float(s)
        if predicate(curve.compute(s)):
            if run_start is None:
                run_start = s
        elif run_start is not None:
            intervals.append(Interval(run_start, previous))
            run_start = None
        previous = s

    if run_start is not None:
        intervals.append(Interval(run_start, previous))

    logger.debug(f"Found {len(intervals)} intervals")
    return intervals
