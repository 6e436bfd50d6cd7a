"""
Distance and intersection utilities for the arcpath curve library.

Provides the planar segment primitives used by polyline projection and
crossing detection.
"""

import math
from typing import Optional, Tuple

from arcpath.geo.coordinates import Point2D
from arcpath.math.vectors import Vector2D

# Segments shorter than this are treated as points
DEGENERATE_LENGTH = 1e-10


def project_onto_segment(p: Point2D, segment_start: Point2D,
                         segment_end: Point2D) -> Tuple[float, Point2D]:
    """
    Project a point onto a line segment.

    Args:
        p: Point
        segment_start: Start point of the line segment
        segment_end: End point of the line segment

    Returns:
        Tuple[float, Point2D]: Projection ratio clamped to [0, 1] and the
        closest point on the segment
    """
    segment = Vector2D.from_points(segment_start, segment_end)
    offset = Vector2D.from_points(segment_start, p)

    # Handle degenerate case where segment is a point
    if segment.magnitude_squared < DEGENERATE_LENGTH ** 2:
        return 0.0, segment_start

    ratio = offset.dot(segment) / segment.magnitude_squared
    ratio = min(1.0, max(0.0, ratio))

    closest = Point2D(segment_start.x + ratio * segment.x,
                      segment_start.y + ratio * segment.y)
    return ratio, closest


def segment_intersection(s1_start: Point2D, s1_end: Point2D,
                         s2_start: Point2D, s2_end: Point2D,
                         tolerance: float = 1e-12) -> Optional[Tuple[float, float]]:
    """
    Locate the intersection of two line segments.

    Parallel, collinear and degenerate segments yield no intersection; the
    caller treats those as "no single crossing point".

    Args:
        s1_start: Start point of first segment
        s1_end: End point of first segment
        s2_start: Start point of second segment
        s2_end: End point of second segment
        tolerance: Slack on the segment parameters

    Returns:
        Optional[Tuple[float, float]]: Parameters (t, u) in [0, 1] such that
        ``s1_start + t * (s1_end - s1_start) == s2_start + u * (s2_end - s2_start)``,
        or None if the segments do not cross
    """
    d1 = Vector2D.from_points(s1_start, s1_end)
    d2 = Vector2D.from_points(s2_start, s2_end)

    if d1.magnitude < DEGENERATE_LENGTH or d2.magnitude < DEGENERATE_LENGTH:
        return None

    denominator = d1.cross_scalar(d2)
    if math.isclose(denominator, 0.0, abs_tol=DEGENERATE_LENGTH * d1.magnitude * d2.magnitude):
        return None

    offset = Vector2D.from_points(s1_start, s2_start)
    t = offset.cross_scalar(d2) / denominator
    u = offset.cross_scalar(d1) / denominator

    if -tolerance <= t <= 1.0 + tolerance and -tolerance <= u <= 1.0 + tolerance:
        return min(1.0, max(0.0, t)), min(1.0, max(0.0, u))

    return None
