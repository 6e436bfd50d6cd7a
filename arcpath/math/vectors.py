"""
Planar vectors for segment projection and side tests.
"""

import math

from arcpath.geo.coordinates import Point2D


class Vector2D:
    """Direction or offset in the plane."""

    def __init__(self, x: float, y: float):
        self.x = float(x)
        self.y = float(y)

    def __repr__(self) -> str:
        return f"Vector2D({self.x:.3f}, {self.y:.3f})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector2D):
            return False
        return math.isclose(self.x, other.x) and math.isclose(self.y, other.y)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def magnitude_squared(self) -> float:
        return self.dot(self)

    def dot(self, other: 'Vector2D') -> float:
        return self.x * other.x + self.y * other.y

    def cross_scalar(self, other: 'Vector2D') -> float:
        """
        z component of the 3D cross product.

        Positive when ``other`` points to the left of this vector, negative
        to the right and zero when both are parallel.
        """
        return self.x * other.y - self.y * other.x

    @classmethod
    def from_points(cls, start: Point2D, end: Point2D) -> 'Vector2D':
        """Vector from ``start`` to ``end``."""
        return cls(end.x - start.x, end.y - start.y)
