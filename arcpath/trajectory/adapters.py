"""
Point adapter contract.

Curves never look inside caller point types. An adapter turns an external
point into plain coordinates plus named scalar fields (``PointFields``) and
back. Adapters must be pure: no hidden state, no side effects.
"""

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from arcpath.geo.coordinates import Point2D, Point3D, has_elevation, normalize_to_point2d
from arcpath.trajectory.interpolators import InterpolationKind


@dataclass
class PointFields:
    """
    Neutral record exchanged between curves and adapters.

    ``heading`` is filled with the curve azimuth when a curve creates points
    and ignored when points are extracted.
    """
    x: float
    y: float
    z: Optional[float] = None
    fields: Dict[str, float] = field(default_factory=dict)
    heading: Optional[float] = None


class PointAdapter(abc.ABC):
    """
    Abstract base class for bidirectional point mappings.

    Subclasses may declare the interpolation of their scalar fields in
    ``FIELD_KINDS``; undeclared fields use the configured default.
    """

    FIELD_KINDS: Dict[str, InterpolationKind] = {}

    @abc.abstractmethod
    def extract(self, point: Any) -> PointFields:
        """
        Split an external point into coordinates and fields.

        Raises:
            ValueError, TypeError, AttributeError or KeyError if the point is not supported
        """
        pass

    @abc.abstractmethod
    def create(self, fields: PointFields) -> Any:
        """Build an external point from coordinates and fields."""
        pass

    def field_kind(self, name: str) -> Optional[InterpolationKind]:
        """Declared interpolation kind of a field, if any."""
        return self.FIELD_KINDS.get(name)


class CoordinateAdapter(PointAdapter):
    """
    Adapter for bare coordinates.

    Accepts ``Point2D``, ``Point3D``, tuples, lists, numpy arrays and any
    object exposing ``x``/``y`` (and optionally ``z``). Creates ``Point3D``
    for curves with elevation and ``Point2D`` otherwise. Carries no fields.
    """

    def extract(self, point: Any) -> PointFields:
        if has_elevation(point):
            p3 = Point3D.from_any(point)
            return PointFields(p3.x, p3.y, p3.z)
        p2 = normalize_to_point2d(point)
        return PointFields(p2.x, p2.y)

    def create(self, fields: PointFields) -> Any:
        if fields.z is not None:
            return Point3D(fields.x, fields.y, fields.z)
        return Point2D(fields.x, fields.y)
