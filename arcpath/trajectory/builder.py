"""
Curve construction from raw point sequences.

The builder is the only way to obtain a ``Curve``. It is all-or-nothing:
any invalid input produces ``None`` and a warning, never a partial curve.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from arcpath.utils.config import config_manager
from arcpath.utils.logger import get_logger, timed
from arcpath.trajectory.adapters import CoordinateAdapter, PointAdapter, PointFields
from arcpath.trajectory.bases import BasisSet, densify
from arcpath.trajectory.curve import Curve
from arcpath.trajectory.interpolators import (
    InterpolationKind, create_interpolant, interpolant_class
)

logger = get_logger("trajectory.builder")

KindLike = Union[str, InterpolationKind]


class BuildError(ValueError):
    """Reason a point sequence cannot become a curve."""
    pass


class Builder:
    """
    Builds curves from sequences of external points.

    Example::

        curve = Builder(PathPointAdapter()).build(path_points)
        if curve is None:
            ...
    """

    def __init__(self, adapter: Optional[PointAdapter] = None,
                 geometry_kind: Optional[KindLike] = None,
                 field_kinds: Optional[Dict[str, KindLike]] = None,
                 min_points: Optional[int] = None):
        """
        Initialize the builder.

        Args:
            adapter: Point adapter (bare coordinates when omitted)
            geometry_kind: Interpolation of x/y/z (configured default when omitted)
            field_kinds: Interpolation per field, overriding the adapter declarations
            min_points: Minimum basis size (configured default when omitted)
        """
        trajectory_config = config_manager.get_trajectory_config()

        self.adapter = adapter if adapter is not None else CoordinateAdapter()
        self.geometry_kind = InterpolationKind.parse(
            geometry_kind or trajectory_config.geometry_interpolation
        )
        self.field_kinds = {name: InterpolationKind.parse(kind)
                            for name, kind in (field_kinds or {}).items()}
        self.min_points = min_points if min_points is not None else trajectory_config.min_points

    def field_kind(self, name: str) -> InterpolationKind:
        """Interpolation used for a scalar field."""
        if name in self.field_kinds:
            return self.field_kinds[name]
        declared = self.adapter.field_kind(name)
        if declared is not None:
            return declared
        return InterpolationKind.parse(
            config_manager.get("trajectory", "field_interpolation", "stairstep")
        )

    @timed("build")
    def build(self, points: Sequence[Any]) -> Optional[Curve]:
        """
        Build a curve through the given points.

        Args:
            points: Spatially ordered external points

        Returns:
            Optional[Curve]: The curve, or None if the points cannot form one
        """
        try:
            curve = self._build(points)
        except BuildError as e:
            logger.warning(f"Cannot build curve: {e}")
            return None

        logger.debug(f"Built curve of length {curve.length():.3f} from {len(points)} points")
        return curve

    def _build(self, points: Sequence[Any]) -> Curve:
        if points is None or len(points) < 2:
            raise BuildError(f"at least 2 points are needed, got {0 if points is None else len(points)}")

        records = self._extract(points)
        coordinates, fields = self._tabulate(records)
        coordinates, fields = self._drop_duplicates(coordinates, fields)

        if len(coordinates) < 2:
            raise BuildError("fewer than 2 distinct points")

        arc_lengths = np.concatenate(
            ([0.0], np.cumsum(np.linalg.norm(np.diff(coordinates, axis=0), axis=1)))
        )

        kinds = {name: self.field_kind(name) for name in fields}
        required = max([self.min_points, interpolant_class(self.geometry_kind).MIN_POINTS]
                       + [interpolant_class(kind).MIN_POINTS for kind in kinds.values()])

        positions = densify(arc_lengths, required)
        bases = BasisSet(positions)

        interpolants = {}
        for axis, name in enumerate(("x", "y", "z")[:coordinates.shape[1]]):
            values = np.interp(positions, arc_lengths, coordinates[:, axis])
            interpolants[name] = create_interpolant(self.geometry_kind, bases, values)

        for name, samples in fields.items():
            values = self._densify_field(samples, arc_lengths, positions, kinds[name])
            interpolants[name] = create_interpolant(kinds[name], bases, values)

        return Curve(bases, interpolants, self.adapter)

    def _extract(self, points: Sequence[Any]) -> List[PointFields]:
        records = []
        for index, point in enumerate(points):
            try:
                records.append(self.adapter.extract(point))
            except (ValueError, TypeError, AttributeError, KeyError) as e:
                raise BuildError(f"point {index} cannot be extracted: {e}")
        return records

    @staticmethod
    def _tabulate(records: List[PointFields]):
        """Stack extracted records into a coordinate matrix and per-field arrays."""
        names = list(records[0].fields)
        use_z = all(record.z is not None for record in records)

        rows = []
        columns = {name: [] for name in names}
        for index, record in enumerate(records):
            if set(record.fields) != set(names):
                raise BuildError(f"point {index} has fields {sorted(record.fields)}, "
                                 f"expected {sorted(names)}")
            rows.append((record.x, record.y, record.z) if use_z else (record.x, record.y))
            for name in names:
                columns[name].append(record.fields[name])

        try:
            coordinates = np.array(rows, dtype=float)
            fields = {name: np.array(values, dtype=float) for name, values in columns.items()}
        except (TypeError, ValueError) as e:
            raise BuildError(f"non-numeric values: {e}")

        if not np.all(np.isfinite(coordinates)):
            raise BuildError("coordinates must be finite")
        for name, values in fields.items():
            if not np.all(np.isfinite(values)):
                raise BuildError(f"field '{name}' must be finite")

        return coordinates, fields

    @staticmethod
    def _drop_duplicates(coordinates: np.ndarray, fields: Dict[str, np.ndarray]):
        """Remove points that coincide with the previously kept point."""
        tolerance = config_manager.get("trajectory", "duplicate_tolerance", 1e-6)

        keep = [0]
        for index in range(1, len(coordinates)):
            if np.linalg.norm(coordinates[index] - coordinates[keep[-1]]) > tolerance:
                keep.append(index)

        if len(keep) < len(coordinates):
            logger.debug(f"Dropped {len(coordinates) - len(keep)} duplicate points")

        return coordinates[keep], {name: values[keep] for name, values in fields.items()}

    @staticmethod
    def _densify_field(samples: np.ndarray, arc_lengths: np.ndarray,
                       positions: np.ndarray, kind: InterpolationKind) -> np.ndarray:
        if kind == InterpolationKind.STAIRSTEP:
            index = np.searchsorted(arc_lengths, positions, side='right') - 1
            return samples[np.clip(index, 0, len(samples) - 1)]
        return np.interp(positions, arc_lengths, samples)


def build(points: Sequence[Any], adapter: Optional[PointAdapter] = None) -> Optional[Curve]:
    """Build a curve with the configured defaults."""
    return Builder(adapter).build(points)
