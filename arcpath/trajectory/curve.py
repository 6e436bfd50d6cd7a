"""
Arc-length parameterized curve.

A ``Curve`` composes one interpolant per geometric dimension (``x``, ``y``
and optionally ``z``) and per named scalar field, all sharing a single
``BasisSet``. It answers position, direction and curvature queries at any
arc-length and supports in-place cropping and ranged field edits.

Curves are created by ``arcpath.trajectory.builder.Builder``. Mutating
operations (``crop``, overlay writes, ``add_field``) must not run
concurrently with any other operation on the same instance; use ``copy()``
to hand snapshots to concurrent readers.
"""

import math
from typing import Any, Dict, List, Optional, Union

import numpy as np

from arcpath.utils.config import config_manager
from arcpath.utils.logger import get_logger
from arcpath.trajectory.adapters import PointAdapter, PointFields
from arcpath.trajectory.bases import ArrayLike, BasisSet, densify, restrict, uniform
from arcpath.trajectory.interpolators import (
    Interpolant, InterpolationKind, create_interpolant
)
from arcpath.trajectory.overlay import RangeOverlay

logger = get_logger("trajectory.curve")

GEOMETRY = ("x", "y", "z")


class TrajectoryError(Exception):
    """Base exception for curve errors."""
    pass


class RangeError(TrajectoryError):
    """Exception raised when a crop or range edit receives an invalid span."""
    pass


class Curve:
    """
    Continuous representation of a path as a function of arc-length.
    """

    def __init__(self, bases: BasisSet, interpolants: Dict[str, Interpolant],
                 adapter: PointAdapter):
        """
        Initialize a curve.

        Args:
            bases: Basis set shared by every interpolant
            interpolants: Interpolants keyed by dimension or field name; must contain x and y
            adapter: Adapter used to create external points

        Raises:
            ValueError: If x/y are missing or an interpolant uses another basis
        """
        if "x" not in interpolants or "y" not in interpolants:
            raise ValueError("A curve needs x and y interpolants")
        for name, interpolant in interpolants.items():
            if interpolant.bases is not bases:
                raise ValueError(f"Interpolant '{name}' does not share the curve basis")

        self._bases = bases
        self._interpolants = dict(interpolants)
        self._adapter = adapter

    def __repr__(self) -> str:
        return (f"Curve(length={self.length():.3f}, samples={len(self._bases)}, "
                f"dimensions={len(self.dimensions)}, fields={self.field_names})")

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def adapter(self) -> PointAdapter:
        return self._adapter

    @property
    def bases(self) -> np.ndarray:
        """Copy of the current basis positions."""
        return self._bases.values.copy()

    @property
    def dimensions(self) -> List[str]:
        """Geometric dimensions, ``['x', 'y']`` or ``['x', 'y', 'z']``."""
        return [name for name in GEOMETRY if name in self._interpolants]

    @property
    def has_elevation(self) -> bool:
        return "z" in self._interpolants

    @property
    def field_names(self) -> List[str]:
        """Names of the scalar fields, in insertion order."""
        return [name for name in self._interpolants if name not in GEOMETRY]

    @property
    def min_points(self) -> int:
        """Smallest basis size every interpolant accepts."""
        return max(interpolant.MIN_POINTS for interpolant in self._interpolants.values())

    def interpolant(self, name: str) -> Interpolant:
        """
        Interpolant of a dimension or field.

        Raises:
            KeyError: If the curve has no such dimension or field
        """
        if name not in self._interpolants:
            raise KeyError(f"Curve has no dimension or field '{name}'")
        return self._interpolants[name]

    def length(self) -> float:
        """Arc-length of the curve (last basis position)."""
        return self._bases.end

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def position(self, s: Union[float, ArrayLike]) -> np.ndarray:
        """
        Coordinates at arc-length ``s``, clamped to ``[0, length]``.

        Returns:
            np.ndarray: Shape ``(d,)`` for a scalar ``s``, ``(n, d)`` for an array,
            with ``d`` the number of dimensions
        """
        coordinates = [self._interpolants[name].compute(s) for name in self.dimensions]
        if np.ndim(s) == 0:
            return np.array(coordinates, dtype=float)
        return np.stack(coordinates, axis=-1)

    def value(self, name: str, s: Union[float, ArrayLike]):
        """Value of a dimension or field at arc-length ``s``."""
        return self.interpolant(name).compute(s)

    def azimuth(self, s: Union[float, ArrayLike]):
        """Direction of travel in the plane, ``atan2(dy/ds, dx/ds)``."""
        dx = self._interpolants["x"].derivative(s)
        dy = self._interpolants["y"].derivative(s)
        return np.arctan2(dy, dx) if np.ndim(s) else math.atan2(dy, dx)

    direction = azimuth

    def elevation(self, s: Union[float, ArrayLike]):
        """Pitch of the curve, ``atan2(dz/ds, hypot(dx/ds, dy/ds))``; 0 for planar curves."""
        if not self.has_elevation:
            return np.zeros(np.shape(s)) if np.ndim(s) else 0.0
        dx = self._interpolants["x"].derivative(s)
        dy = self._interpolants["y"].derivative(s)
        dz = self._interpolants["z"].derivative(s)
        result = np.arctan2(dz, np.hypot(dx, dy))
        return result if np.ndim(s) else float(result)

    def curvature(self, s: Union[float, ArrayLike]):
        """
        Signed planar curvature ``(x'y'' - y'x'') / (x'^2 + y'^2)^(3/2)``.

        Returns 0 where the denominator underflows.
        """
        epsilon = config_manager.get("queries", "curvature_epsilon", 1e-12)
        x = self._interpolants["x"]
        y = self._interpolants["y"]

        dx, dy = np.asarray(x.derivative(s)), np.asarray(y.derivative(s))
        ddx, ddy = np.asarray(x.second_derivative(s)), np.asarray(y.second_derivative(s))

        numerator = dx * ddy - dy * ddx
        denominator = np.power(dx * dx + dy * dy, 1.5)
        safe = denominator > epsilon
        result = np.where(safe, numerator / np.where(safe, denominator, 1.0), 0.0)
        return result if np.ndim(s) else float(result)

    def sample(self, s: float) -> PointFields:
        """Coordinates, fields and heading at arc-length ``s``."""
        x, y, *rest = self.position(s)
        return PointFields(
            x=float(x),
            y=float(y),
            z=float(rest[0]) if rest else None,
            fields={name: self._interpolants[name].compute(s) for name in self.field_names},
            heading=self.azimuth(s),
        )

    def compute(self, s: float) -> Any:
        """External point at arc-length ``s``, created by the curve's adapter."""
        return self._adapter.create(self.sample(s))

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def field(self, name: str) -> RangeOverlay:
        """
        Editor for a scalar field.

        Raises:
            KeyError: If the field does not exist (geometric dimensions are not fields)
        """
        if name in GEOMETRY or name not in self._interpolants:
            raise KeyError(f"Curve has no field '{name}'")
        return RangeOverlay(self, name)

    def __getitem__(self, name: str) -> RangeOverlay:
        return self.field(name)

    def __setitem__(self, name: str, value: float) -> None:
        self.field(name).set(value)

    def add_field(self, name: str, value: float = 0.0,
                  kind: Union[str, InterpolationKind] = InterpolationKind.STAIRSTEP) -> RangeOverlay:
        """
        Attach a new scalar field holding ``value`` everywhere.

        Raises:
            ValueError: If the name is a geometric dimension or already used
        """
        if name in GEOMETRY or name in self._interpolants:
            raise ValueError(f"Field '{name}' already exists or is reserved")

        self._interpolants[name] = create_interpolant(
            kind, self._bases, np.full(len(self._bases), float(value))
        )
        return RangeOverlay(self, name)

    def _assign_field(self, name: str, value: float) -> None:
        interpolant = self._interpolants[name]
        interpolant.rebuild(np.full(len(self._bases), float(value)))

    def _assign_range(self, name: str, start: float, end: float, value: float) -> None:
        """
        Write ``value`` to the samples of ``name`` within ``[start, end]``.

        Both boundaries become basis positions first. A piecewise-constant
        field keeps its previous value at ``end`` (unless ``end`` is the curve
        end) so that nothing past ``end`` changes.
        """
        start, end = self._validate_span(start, end)
        self._insert_bases([start, end])

        interpolant = self._interpolants[name]
        bases = self._bases.values
        values = interpolant.values

        if interpolant.piecewise_constant:
            mask = (bases >= start) & (bases < end)
            if end == bases[-1]:
                mask |= bases == end
        else:
            mask = (bases >= start) & (bases <= end)

        values[mask] = float(value)
        interpolant.rebuild(values)
        logger.debug(f"Field '{name}' set to {value} on [{start:.3f}, {end:.3f}] "
                     f"({int(mask.sum())} samples)")

    def _validate_span(self, start: float, end: float):
        tolerance = config_manager.get("trajectory", "boundary_tolerance", 1e-9)
        length = self.length()

        if not start < end:
            raise RangeError(f"Range must be increasing, got [{start}, {end}]")
        if start < 0.0 or end > length + tolerance:
            raise RangeError(f"Range [{start}, {end}] exceeds curve span [0, {length}]")

        end = min(float(end), length)
        if end <= start:
            raise RangeError(f"Range [{start}, {end}] is empty within curve length {length}")
        return float(start), end

    # ------------------------------------------------------------------
    # Basis mutation
    # ------------------------------------------------------------------

    def _rebase(self, positions: np.ndarray, new_bases: Optional[np.ndarray] = None) -> None:
        """
        Re-sample every interpolant at ``positions`` and install ``new_bases``
        (defaults to ``positions``) as the shared basis.
        """
        samples = {name: interpolant.sample(positions)
                   for name, interpolant in self._interpolants.items()}

        self._bases.replace(positions if new_bases is None else new_bases)

        for name, interpolant in self._interpolants.items():
            interpolant.rebuild(samples[name])

    def _insert_bases(self, positions: List[float]) -> None:
        merged = self._bases.insert(positions)
        if len(merged) != len(self._bases):
            self._rebase(merged)

    def crop(self, start: float, length: float) -> 'Curve':
        """
        Restrict the curve to ``[start, start + length]`` and re-base it to 0.

        Samples inside the range keep their values; boundary samples take the
        interpolated values. Afterwards ``length()`` equals ``length`` exactly.

        Args:
            start: Arc-length where the cropped curve begins
            length: Length of the cropped curve

        Returns:
            Curve: ``self``, for chaining

        Raises:
            RangeError: If start is negative, length is not positive or the
                range runs past the end of the curve
        """
        tolerance = config_manager.get("trajectory", "boundary_tolerance", 1e-9)
        total = self.length()

        if start < 0.0:
            raise RangeError(f"Crop start must be non-negative, got {start}")
        if length <= 0.0:
            raise RangeError(f"Crop length must be positive, got {length}")
        if start + length > total + tolerance:
            raise RangeError(f"Crop range [{start}, {start + length}] exceeds curve length {total}")

        end = min(start + length, total)
        if end <= start:
            raise RangeError(f"Crop start {start} leaves nothing of curve length {total}")
        positions = restrict(self._bases.values, start, end)

        # Drop interior samples that would collide with the boundaries after shifting
        shifted = positions - start
        keep = np.ones(len(positions), dtype=bool)
        keep[1:-1] = (shifted[1:-1] > 0.0) & (shifted[1:-1] < length)
        positions, shifted = positions[keep], shifted[keep]
        shifted[0], shifted[-1] = 0.0, float(length)

        if len(positions) < self.min_points:
            positions = densify(positions, self.min_points)
            shifted = densify(shifted, self.min_points)

        self._rebase(positions, shifted)
        logger.debug(f"Cropped curve to [{start:.3f}, {end:.3f}], {len(positions)} samples")
        return self

    # ------------------------------------------------------------------
    # Restoration
    # ------------------------------------------------------------------

    def restore(self, min_points: int = 0) -> List[Any]:
        """
        External points at every basis position.

        Args:
            min_points: Minimum number of points; the basis is densified when smaller

        Returns:
            List[Any]: Points created by the adapter, each carrying every field
        """
        positions = self._bases.values
        if min_points > len(positions):
            positions = densify(positions, min_points)
        return [self.compute(s) for s in positions]

    def resample(self, interval: float) -> List[Any]:
        """
        External points every ``interval`` of arc-length, always including the end.

        Raises:
            ValueError: If interval is not positive
        """
        threshold = config_manager.get("trajectory", "resample_overlap_threshold", 0.1)
        threshold = min(threshold, interval / 2.0)
        return [self.compute(s) for s in uniform(self.length(), interval, threshold)]

    def copy(self) -> 'Curve':
        """Independent snapshot of the curve."""
        bases = self._bases.copy()
        interpolants = {
            name: type(interpolant)(bases, interpolant.values)
            for name, interpolant in self._interpolants.items()
        }
        return Curve(bases, interpolants, self._adapter)
