"""
Closest-point projection onto a curve.

The search projects the query onto every chord between consecutive basis
samples, keeps the nearest few chords and refines each with a bounded scalar
minimization over the chord and its neighbors.
"""

from typing import Any, Callable, Optional

import numpy as np
from scipy.optimize import minimize_scalar

from arcpath.geo.coordinates import as_coordinates
from arcpath.utils.config import config_manager
from arcpath.utils.logger import get_logger, timed
from arcpath.trajectory.bases import densify

logger = get_logger("algorithms.closest")


def _sample_positions(curve, min_points: Optional[int]) -> np.ndarray:
    if min_points is None:
        min_points = config_manager.get("queries", "closest_min_points", 0)
    return densify(curve.bases, min_points)


def _target(curve, point: Any):
    """Query coordinates, in 3-D only when both the curve and the point carry elevation."""
    target = as_coordinates(point)
    dimensions = 3 if (curve.has_elevation and target.size == 3) else 2
    return target[:dimensions], dimensions


def _distance_function(curve, target: np.ndarray, dimensions: int) -> Callable:
    def distance(s):
        position = curve.position(s)
        return np.linalg.norm(position[..., :dimensions] - target, axis=-1)

    return distance


def _chord_projections(samples: np.ndarray, target: np.ndarray):
    """Clamped projection ratio of the target onto each chord, and the chord distance."""
    starts = samples[:-1]
    chords = np.diff(samples, axis=0)
    squared = np.einsum('ij,ij->i', chords, chords)

    safe = np.where(squared > 0.0, squared, 1.0)
    ratios = np.where(squared > 0.0, np.einsum('ij,ij->i', target - starts, chords) / safe, 0.0)
    ratios = np.clip(ratios, 0.0, 1.0)

    nearest = starts + ratios[:, None] * chords
    return ratios, np.linalg.norm(nearest - target, axis=1)


def _refine(distance: Callable, lower: float, upper: float, best_s: float) -> float:
    """Minimize ``distance`` on ``[lower, upper]``, never returning a worse value than ``best_s``."""
    if upper <= lower:
        return best_s

    tolerance = config_manager.get("queries", "closest_tolerance", 1e-6)
    result = minimize_scalar(lambda s: float(distance(s)), bounds=(lower, upper),
                             method='bounded', options={'xatol': tolerance})

    if result.success and result.fun < float(distance(best_s)):
        return float(result.x)
    return best_s


def _search(curve, point: Any, positions: np.ndarray, allowed: np.ndarray) -> float:
    """
    Nearest arc-length among the allowed samples and the chords joining two
    allowed samples. Refinement windows only extend over allowed chords.
    """
    target, dimensions = _target(curve, point)
    distance = _distance_function(curve, target, dimensions)
    samples = curve.position(positions)[:, :dimensions]

    vertex_distances = np.where(allowed, np.linalg.norm(samples - target, axis=1), np.inf)
    index = int(np.argmin(vertex_distances))
    best_s, best_distance = float(positions[index]), float(vertex_distances[index])

    if len(positions) < 2:
        return best_s

    chord_allowed = allowed[:-1] & allowed[1:]
    ratios, chord_distances = _chord_projections(samples, target)
    chord_distances = np.where(chord_allowed, chord_distances, np.inf)

    count = config_manager.get("queries", "closest_candidates", 3)
    for i in np.argsort(chord_distances, kind='stable')[:max(count, 1)]:
        if not np.isfinite(chord_distances[i]):
            break

        estimate = float((1.0 - ratios[i]) * positions[i] + ratios[i] * positions[i + 1])
        lower = positions[i - 1] if i > 0 and chord_allowed[i - 1] else positions[i]
        upper = positions[i + 2] if i + 2 < len(positions) and chord_allowed[i + 1] else positions[i + 1]

        s = _refine(distance, float(lower), float(upper), estimate)
        d = float(distance(s))
        if d < best_distance:
            best_s, best_distance = s, d

    return best_s


@timed("closest")
def closest(curve, point: Any, min_points: Optional[int] = None) -> float:
    """
    Arc-length of the curve position nearest to a point.

    Args:
        curve: Curve to search
        point: Query point (Point2D, Point3D, sequence, array or object with x/y)
        min_points: Samples used by the coarse scan (configured default when omitted)

    Returns:
        float: Arc-length in ``[0, length]``
    """
    positions = _sample_positions(curve, min_points)
    s = _search(curve, point, positions, np.ones(len(positions), dtype=bool))
    logger.debug(f"Closest arc-length {s:.6f} ({len(positions)} samples)")
    return s


@timed("closest_with_constraint")
def closest_with_constraint(curve, point: Any, constraint: Callable[[Any], bool],
                            min_points: Optional[int] = None) -> Optional[float]:
    """
    Arc-length of the nearest curve position whose point satisfies a constraint.

    The constraint is evaluated on the external points the curve creates at
    each sample. Chords are searched only when both of their samples satisfy
    it; isolated allowed samples are candidates on their own.

    Args:
        curve: Curve to search
        point: Query point
        constraint: Predicate on external points
        min_points: Samples used by the coarse scan (configured default when omitted)

    Returns:
        Optional[float]: Arc-length, or None if no sample satisfies the constraint
    """
    positions = _sample_positions(curve, min_points)
    allowed = np.array([bool(constraint(curve.compute(s))) for s in positions])

    if not allowed.any():
        logger.debug("No sample satisfies the constraint")
        return None

    return _search(curve, point, positions, allowed)
