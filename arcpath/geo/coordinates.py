"""
Point types exchanged with callers of the curve library.

Callers hand in coordinates in many shapes: tuples, arrays, message objects
with ``x``/``y`` (and maybe ``z``) attributes. The helpers at the bottom of
this module turn them into ``Point2D``/``Point3D`` or plain arrays.
"""
import math
from typing import Tuple, List, Union

import numpy as np

Coordinate = Union[tuple, list, np.ndarray, 'Point2D', 'Point3D', object]


class Point2D:
    """Point in the plane; equality is tolerant to float noise."""

    def __init__(self, x: float, y: float):
        self.x = float(x)
        self.y = float(y)

    def __repr__(self) -> str:
        return f"Point2D({self.x:.3f}, {self.y:.3f})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point2D):
            return False
        return math.isclose(self.x, other.x) and math.isclose(self.y, other.y)

    def distance_to(self, other: 'Point2D') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def from_any(cls, point: Coordinate) -> 'Point2D':
        """
        Convert a sequence of at least two numbers or an object with
        ``x``/``y`` attributes. Extra components are dropped.

        Raises:
            ValueError: If the input format is not recognized
        """
        if isinstance(point, Point2D):
            return point
        if isinstance(point, (tuple, list, np.ndarray)) and len(point) >= 2:
            return cls(point[0], point[1])
        if hasattr(point, 'x') and hasattr(point, 'y'):
            return cls(point.x, point.y)
        raise ValueError(f"Cannot convert {point} to Point2D")


class Point3D:
    """Point with elevation, for curves that carry a z coordinate."""

    def __init__(self, x: float, y: float, z: float):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    def __repr__(self) -> str:
        return f"Point3D({self.x:.3f}, {self.y:.3f}, {self.z:.3f})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Point3D):
            return False
        return all(math.isclose(a, b) for a, b in zip(self.as_tuple(), other.as_tuple()))

    def distance_to(self, other: 'Point3D') -> float:
        return math.dist(self.as_tuple(), other.as_tuple())

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def from_any(cls, point: Coordinate, default_z: float = 0.0) -> 'Point3D':
        """
        Convert a point representation, using ``default_z`` where the input
        has no elevation.

        Raises:
            ValueError: If the input format is not recognized
        """
        if isinstance(point, Point3D):
            return point
        if isinstance(point, (tuple, list, np.ndarray)) and len(point) >= 2:
            z = point[2] if len(point) >= 3 else default_z
            return cls(point[0], point[1], z)
        if hasattr(point, 'x') and hasattr(point, 'y'):
            z = getattr(point, 'z', None)
            return cls(point.x, point.y, default_z if z is None else z)
        raise ValueError(f"Cannot convert {point} to Point3D")


class BoundingBox:
    """
    Axis-aligned rectangle between two corners.

    Crossing detection uses it to skip segment pairs that cannot meet.
    """

    def __init__(self, min_point: Point2D, max_point: Point2D):
        self.min_point = min_point
        self.max_point = max_point

    def __repr__(self) -> str:
        return f"BoundingBox({self.min_point!r}, {self.max_point!r})"

    @property
    def width(self) -> float:
        return self.max_point.x - self.min_point.x

    @property
    def height(self) -> float:
        return self.max_point.y - self.min_point.y

    def contains_point(self, point: Point2D) -> bool:
        return (self.min_point.x <= point.x <= self.max_point.x and
                self.min_point.y <= point.y <= self.max_point.y)

    def intersects(self, other: 'BoundingBox') -> bool:
        """True if the boxes overlap or touch."""
        return not (self.max_point.x < other.min_point.x or
                    self.min_point.x > other.max_point.x or
                    self.max_point.y < other.min_point.y or
                    self.min_point.y > other.max_point.y)

    @classmethod
    def from_points(cls, points: List[Point2D]) -> 'BoundingBox':
        """
        Smallest box containing all points.

        Raises:
            ValueError: If the points list is empty
        """
        if not points:
            raise ValueError("Cannot create a bounding box from an empty list of points")

        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(Point2D(min(xs), min(ys)), Point2D(max(xs), max(ys)))

    def expand(self, margin: float) -> 'BoundingBox':
        """Copy grown by ``margin`` on every side."""
        return BoundingBox(
            Point2D(self.min_point.x - margin, self.min_point.y - margin),
            Point2D(self.max_point.x + margin, self.max_point.y + margin)
        )


def normalize_to_point2d(coord: Coordinate) -> Point2D:
    """
    Convert a coordinate in any accepted format to a ``Point2D``.

    Raises:
        ValueError: If the coordinate format is not recognized
    """
    if isinstance(coord, Point3D):
        return Point2D(coord.x, coord.y)
    try:
        return Point2D.from_any(coord)
    except (TypeError, IndexError) as e:
        raise ValueError(f"Error converting {coord} to Point2D: {str(e)}")


def has_elevation(coord: object) -> bool:
    """Tell whether a coordinate carries a z component."""
    if isinstance(coord, (tuple, list, np.ndarray)):
        return len(coord) >= 3
    return getattr(coord, 'z', None) is not None


def as_coordinates(coord: object) -> np.ndarray:
    """
    Convert a coordinate into a float array of length 2 or 3.

    The result has three entries only when the input carries elevation.

    Raises:
        ValueError: If the coordinate format is not recognized
    """
    if has_elevation(coord):
        try:
            return np.array(Point3D.from_any(coord).as_tuple(), dtype=float)
        except (TypeError, IndexError) as e:
            raise ValueError(f"Error converting {coord} to Point3D: {str(e)}")
    return np.array(normalize_to_point2d(coord).as_tuple(), dtype=float)
