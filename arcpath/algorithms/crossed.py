"""
Crossings between a curve and a polyline.

Chords between consecutive curve samples are intersected with every
polyline segment. Each hit is refined on the continuous curve by finding
the root of the signed side function of the segment.
"""

from typing import Any, List, Optional, Sequence, Union

from scipy.optimize import brentq

from arcpath.geo.coordinates import BoundingBox, Point2D
from arcpath.geo.distances import DEGENERATE_LENGTH, segment_intersection
from arcpath.geo.polyline import Polyline
from arcpath.math.vectors import Vector2D
from arcpath.utils.config import config_manager
from arcpath.utils.logger import get_logger, timed
from arcpath.trajectory.bases import densify

logger = get_logger("algorithms.crossed")


def _side_function(curve, start: Point2D, end: Point2D):
    """Signed distance-like value, positive left of ``start -> end``."""
    direction = Vector2D.from_points(start, end)

    def side(s: float) -> float:
        x, y = curve.position(s)[:2]
        return direction.cross_scalar(Vector2D(x - start.x, y - start.y))

    return side


def _refine(curve, start: Point2D, end: Point2D, lower: float, upper: float,
            estimate: float) -> float:
    side = _side_function(curve, start, end)
    f_lower, f_upper = side(lower), side(upper)

    if f_lower * f_upper > 0.0:
        return estimate

    tolerance = config_manager.get("queries", "crossing_tolerance", 1e-6)
    return float(brentq(side, lower, upper, xtol=tolerance * 1e-3))


def _deduplicate(positions: List[float], tolerance: float) -> List[float]:
    result = []
    for s in sorted(positions):
        if not result or s - result[-1] > tolerance:
            result.append(s)
    return result


@timed("crossed")
def crossed(curve, polyline: Union[Polyline, Sequence[Any]],
            min_points: Optional[int] = None) -> List[float]:
    """
    Arc-lengths at which the curve crosses a polyline.

    Args:
        curve: Curve to test
        polyline: Polyline or sequence of points
        min_points: Curve samples used for the chords (configured default when omitted)

    Returns:
        List[float]: Ascending arc-lengths, each crossing reported once;
        empty when the curve never meets the polyline
    """
    if not isinstance(polyline, Polyline):
        polyline = Polyline(list(polyline))
    if len(polyline) < 2:
        return []

    if min_points is None:
        min_points = config_manager.get("queries", "crossing_min_points", 0)
    tolerance = config_manager.get("queries", "crossing_tolerance", 1e-6)

    positions = densify(curve.bases, min_points)
    samples = [Point2D(x, y) for x, y in curve.position(positions)[:, :2]]
    segments = [(a, b) for a, b in polyline.segments() if a.distance_to(b) >= DEGENERATE_LENGTH]

    # Cheap rejection before pairwise tests
    if not polyline.bounding_box.expand(tolerance).intersects(
            BoundingBox.from_points(samples).expand(tolerance)):
        return []

    hits = []
    for i in range(len(samples) - 1):
        chord_start, chord_end = samples[i], samples[i + 1]
        if chord_start.distance_to(chord_end) < DEGENERATE_LENGTH:
            continue

        for start, end in segments:
            intersection = segment_intersection(chord_start, chord_end, start, end)
            if intersection is None:
                continue

            t, _ = intersection
            lower, upper = float(positions[i]), float(positions[i + 1])
            estimate = lower + t * (upper - lower)
            hits.append(_refine(curve, start, end, lower, upper, estimate))

    result = _deduplicate(hits, tolerance)
    logger.debug(f"Found {len(result)} crossings from {len(hits)} chord hits")
    return result
