"""
Polyline representation for the arcpath curve library.

A polyline is the external reference geometry curves are tested against
(stop lines, lane bounds, centerlines). It offers the arc-length primitives
callers usually get from their map library: interpolation at a distance,
projection to arc coordinates and extraction of a sub-range.
"""

import bisect
from typing import Iterator, List, Tuple, Union

from arcpath.geo.coordinates import BoundingBox, Point2D, normalize_to_point2d
from arcpath.geo.distances import DEGENERATE_LENGTH, project_onto_segment
from arcpath.math.vectors import Vector2D


class Polyline:
    """
    Ordered sequence of planar points joined by straight segments.
    """

    def __init__(self, points: List[Union[Point2D, Tuple[float, float]]]):
        """
        Initialize a polyline.

        Args:
            points: Vertices of the polyline; anything with x/y coordinates is accepted
                and elevation is dropped
        """
        self.points = [normalize_to_point2d(p) for p in points]

        self._arc_lengths = [0.0]
        for start, end in zip(self.points, self.points[1:]):
            self._arc_lengths.append(self._arc_lengths[-1] + start.distance_to(end))

    def __len__(self) -> int:
        """Number of vertices in the polyline."""
        return len(self.points)

    def __getitem__(self, index) -> Point2D:
        """Get vertex at index."""
        return self.points[index]

    def __iter__(self):
        """Iterate over vertices."""
        return iter(self.points)

    def __repr__(self) -> str:
        return f"Polyline({len(self.points)} points, length={self.length:.3f})"

    @property
    def length(self) -> float:
        """Total length of the polyline."""
        return self._arc_lengths[-1]

    @property
    def arc_lengths(self) -> List[float]:
        """Cumulative distance of each vertex from the first one."""
        return list(self._arc_lengths)

    @property
    def bounding_box(self) -> BoundingBox:
        """Axis-aligned box around every vertex."""
        return BoundingBox.from_points(self.points)

    def segments(self) -> Iterator[Tuple[Point2D, Point2D]]:
        """Iterate over (start, end) pairs of consecutive vertices."""
        return zip(self.points, self.points[1:])

    def interpolate(self, distance: float) -> Point2D:
        """
        Point located at a given distance along the polyline.

        Args:
            distance: Arc-length from the first vertex, clamped to [0, length]

        Returns:
            Point2D: Interpolated point

        Raises:
            ValueError: If the polyline is empty
        """
        if not self.points:
            raise ValueError("Polyline is empty")
        if len(self.points) == 1 or distance <= 0.0:
            return self.points[0]
        if distance >= self.length:
            return self.points[-1]

        index = bisect.bisect_right(self._arc_lengths, distance) - 1
        index = min(index, len(self.points) - 2)
        start, end = self.points[index], self.points[index + 1]
        segment_length = self._arc_lengths[index + 1] - self._arc_lengths[index]
        if segment_length < DEGENERATE_LENGTH:
            return start

        ratio = (distance - self._arc_lengths[index]) / segment_length
        return Point2D(start.x + ratio * (end.x - start.x),
                       start.y + ratio * (end.y - start.y))

    def project(self, point: Union[Point2D, Tuple[float, float]]) -> Tuple[float, float]:
        """
        Arc coordinates of a point relative to the polyline.

        Args:
            point: Point to project

        Returns:
            Tuple[float, float]: Arc-length of the closest point on the polyline and
            the signed lateral distance (positive to the left of the direction of travel)

        Raises:
            ValueError: If the polyline has fewer than 2 vertices
        """
        if len(self.points) < 2:
            raise ValueError("Polyline needs at least 2 points for projection")

        target = normalize_to_point2d(point)
        best = None

        for index, (start, end) in enumerate(self.segments()):
            ratio, closest = project_onto_segment(target, start, end)
            distance = target.distance_to(closest)
            if best is None or distance < best[0]:
                best = (distance, index, ratio, start, end)

        distance, index, ratio, start, end = best
        segment_length = self._arc_lengths[index + 1] - self._arc_lengths[index]
        arc_length = self._arc_lengths[index] + ratio * segment_length

        side = Vector2D.from_points(start, end).cross_scalar(Vector2D.from_points(start, target))
        return arc_length, distance if side >= 0.0 else -distance

    def extract(self, start: float, end: float) -> 'Polyline':
        """
        Sub-polyline between two arc-lengths.

        The result starts and ends at interpolated points and keeps every
        vertex strictly in between.

        Args:
            start: Start arc-length
            end: End arc-length

        Returns:
            Polyline: Extracted polyline

        Raises:
            ValueError: If start is not smaller than end
        """
        if start >= end:
            raise ValueError(f"Extraction range must be increasing, got [{start}, {end}]")

        start = max(0.0, start)
        end = min(self.length, end)

        points = [self.interpolate(start)]
        for vertex, s in zip(self.points, self._arc_lengths):
            if start < s < end:
                points.append(vertex)
        points.append(self.interpolate(end))

        return Polyline(points)
