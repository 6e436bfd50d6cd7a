"""
Curvature analysis of curves.
"""

from typing import Optional, Tuple

import numpy as np
from scipy.optimize import minimize_scalar

from arcpath.utils.config import config_manager
from arcpath.utils.logger import get_logger, timed
from arcpath.trajectory.bases import densify

logger = get_logger("algorithms.curvature")


def curvature_profile(curve, min_points: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Signed curvature sampled densely along the curve.

    Args:
        curve: Curve to sample
        min_points: Minimum number of samples (configured default when omitted)

    Returns:
        Tuple[np.ndarray, np.ndarray]: Arc-lengths and curvatures
    """
    if min_points is None:
        min_points = config_manager.get("queries", "curvature_min_points", 100)

    positions = densify(curve.bases, min_points)
    return positions, np.asarray(curve.curvature(positions), dtype=float)


@timed("curvature_extremum")
def curvature_extremum(curve, min_points: Optional[int] = None,
                       refine: Optional[bool] = None) -> Tuple[float, float]:
    """
    Location and magnitude of the largest absolute curvature.

    Args:
        curve: Curve to analyse
        min_points: Minimum number of samples (configured default when omitted)
        refine: Refine around the best sample with a bounded minimization

    Returns:
        Tuple[float, float]: Arc-length and absolute curvature there
    """
    if refine is None:
        refine = config_manager.get("queries", "curvature_refine", True)

    positions, curvatures = curvature_profile(curve, min_points)
    magnitudes = np.abs(curvatures)

    index = int(np.argmax(magnitudes))
    best_s, best_value = float(positions[index]), float(magnitudes[index])

    if refine:
        lower = positions[max(index - 1, 0)]
        upper = positions[min(index + 1, len(positions) - 1)]
        if upper > lower:
            result = minimize_scalar(lambda s: -abs(curve.curvature(s)),
                                     bounds=(lower, upper), method='bounded')
            if result.success and -result.fun > best_value:
                best_s, best_value = float(result.x), float(-result.fun)

    logger.debug(f"Curvature extremum {best_value:.6f} at s={best_s:.3f}")
    return best_s, best_value


def max_curvature(curve, min_points: Optional[int] = None) -> float:
    """Largest absolute curvature along the curve; never negative."""
    return curvature_extremum(curve, min_points)[1]
