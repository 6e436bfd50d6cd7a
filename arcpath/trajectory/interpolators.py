"""
One-dimensional interpolants over a shared arc-length basis.

Each interpolant owns one value per basis position and answers value, first
and second derivative at arbitrary arc-lengths. Queries are clamped to the
span of the basis. Geometry is normally backed by a natural cubic spline,
scalar fields such as velocity or lane ids by a stairstep function.
"""

import abc
from enum import Enum
from typing import Dict, Type, Union

import numpy as np
from scipy.interpolate import Akima1DInterpolator, CubicSpline

from arcpath.trajectory.bases import ArrayLike, BasisSet

Query = Union[float, ArrayLike]


class InterpolationKind(Enum):
    """Interpolation schemes available for curve dimensions and fields."""
    CUBIC = "cubic"            # Natural cubic spline
    AKIMA = "akima"            # Akima spline, robust to outliers
    LINEAR = "linear"          # Piecewise linear
    STAIRSTEP = "stairstep"    # Piecewise constant, value of the left sample

    @classmethod
    def parse(cls, value: Union[str, 'InterpolationKind']) -> 'InterpolationKind':
        """Accept either a kind or its (case-insensitive) configuration name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown interpolation kind: {value}")


class Interpolant(abc.ABC):
    """
    Abstract base class for all interpolants.

    Subclasses implement ``_fit`` and the three ``_evaluate*`` hooks on
    clamped float arrays; the base class handles validation, clamping and
    scalar/array dispatch.
    """

    kind: InterpolationKind = None

    # Minimum number of basis positions the scheme needs
    MIN_POINTS = 2

    # Value is held between samples and jumps at them
    piecewise_constant = False

    def __init__(self, bases: BasisSet, values: ArrayLike):
        """
        Initialize and fit the interpolant.

        Args:
            bases: Shared basis set (referenced, not copied)
            values: One value per basis position

        Raises:
            ValueError: If the number of values does not match the basis or
                the basis is too small for the scheme
        """
        self._bases = bases
        self._values = None
        self.rebuild(values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._values)} samples)"

    @property
    def bases(self) -> BasisSet:
        return self._bases

    @property
    def values(self) -> np.ndarray:
        """Copy of the sample values."""
        return self._values.copy()

    def rebuild(self, values: ArrayLike) -> None:
        """
        Replace the sample values and refit against the current basis.

        Raises:
            ValueError: If the values do not match the basis
        """
        values = np.array(values, dtype=float)
        if values.ndim != 1 or values.size != len(self._bases):
            raise ValueError(
                f"Expected {len(self._bases)} values, got {values.size}"
            )
        if len(self._bases) < self.MIN_POINTS:
            raise ValueError(
                f"{type(self).__name__} needs at least {self.MIN_POINTS} points, "
                f"got {len(self._bases)}"
            )
        if not np.all(np.isfinite(values)):
            raise ValueError("Interpolated values must be finite")

        self._values = values
        self._fit()

    def _clamp(self, s: Query):
        scalar = np.ndim(s) == 0
        positions = np.clip(np.asarray(s, dtype=float), self._bases.start, self._bases.end)
        return scalar, np.atleast_1d(positions)

    def _dispatch(self, evaluate, s: Query):
        scalar, positions = self._clamp(s)
        result = np.asarray(evaluate(positions), dtype=float)
        return float(result[0]) if scalar else result

    def compute(self, s: Query):
        """Value at arc-length ``s`` (scalar or array)."""
        return self._dispatch(self._evaluate, s)

    def __call__(self, s: Query):
        return self.compute(s)

    def derivative(self, s: Query):
        """First derivative with respect to arc-length."""
        return self._dispatch(self._evaluate_derivative, s)

    def second_derivative(self, s: Query):
        """Second derivative with respect to arc-length."""
        return self._dispatch(self._evaluate_second_derivative, s)

    def sample(self, positions: ArrayLike) -> np.ndarray:
        """
        Values at new positions, reusing stored samples where a position
        already is a basis position.
        """
        positions = np.asarray(positions, dtype=float)
        result = np.atleast_1d(np.asarray(self.compute(positions), dtype=float)).copy()

        current = self._bases.values
        index = np.clip(np.searchsorted(current, positions), 0, len(current) - 1)
        exact = current[index] == positions
        result[exact] = self._values[index[exact]]

        return result

    @abc.abstractmethod
    def _fit(self) -> None:
        pass

    @abc.abstractmethod
    def _evaluate(self, s: np.ndarray) -> np.ndarray:
        pass

    @abc.abstractmethod
    def _evaluate_derivative(self, s: np.ndarray) -> np.ndarray:
        pass

    @abc.abstractmethod
    def _evaluate_second_derivative(self, s: np.ndarray) -> np.ndarray:
        pass


class _PolynomialInterpolant(Interpolant):
    """Shared evaluation for scipy piecewise polynomials."""

    def _fit(self) -> None:
        self._poly = self._make_polynomial(self._bases.values, self._values)

    @abc.abstractmethod
    def _make_polynomial(self, x: np.ndarray, y: np.ndarray):
        pass

    def _evaluate(self, s):
        return self._poly(s)

    def _evaluate_derivative(self, s):
        return self._poly(s, 1)

    def _evaluate_second_derivative(self, s):
        return self._poly(s, 2)


class CubicSplineInterpolant(_PolynomialInterpolant):
    """Natural cubic spline (zero curvature at both ends)."""

    kind = InterpolationKind.CUBIC
    MIN_POINTS = 4

    def _make_polynomial(self, x, y):
        return CubicSpline(x, y, bc_type='natural')


class AkimaInterpolant(_PolynomialInterpolant):
    """Akima spline; avoids the overshoot of cubic splines near outliers."""

    kind = InterpolationKind.AKIMA
    MIN_POINTS = 5

    def _make_polynomial(self, x, y):
        return Akima1DInterpolator(x, y)


class LinearInterpolant(Interpolant):
    """Piecewise linear interpolation between samples."""

    kind = InterpolationKind.LINEAR

    def _fit(self) -> None:
        bases = self._bases.values
        self._slopes = np.diff(self._values) / np.diff(bases)

    def _segments(self, s):
        bases = self._bases.values
        index = np.searchsorted(bases, s, side='right') - 1
        return np.clip(index, 0, len(bases) - 2)

    def _evaluate(self, s):
        return np.interp(s, self._bases.values, self._values)

    def _evaluate_derivative(self, s):
        return self._slopes[self._segments(s)]

    def _evaluate_second_derivative(self, s):
        return np.zeros_like(s)


class StairstepInterpolant(Interpolant):
    """
    Piecewise constant interpolation.

    The value on ``[b[i], b[i+1])`` is the sample at ``b[i]``; the last
    sample holds only at the very end of the basis.
    """

    kind = InterpolationKind.STAIRSTEP
    piecewise_constant = True

    def _fit(self) -> None:
        pass

    def _evaluate(self, s):
        bases = self._bases.values
        index = np.searchsorted(bases, s, side='right') - 1
        return self._values[np.clip(index, 0, len(bases) - 1)]

    def _evaluate_derivative(self, s):
        return np.zeros_like(s)

    def _evaluate_second_derivative(self, s):
        return np.zeros_like(s)


INTERPOLANTS: Dict[InterpolationKind, Type[Interpolant]] = {
    InterpolationKind.CUBIC: CubicSplineInterpolant,
    InterpolationKind.AKIMA: AkimaInterpolant,
    InterpolationKind.LINEAR: LinearInterpolant,
    InterpolationKind.STAIRSTEP: StairstepInterpolant,
}


def interpolant_class(kind: Union[str, InterpolationKind]) -> Type[Interpolant]:
    """Interpolant class implementing ``kind``."""
    return INTERPOLANTS[InterpolationKind.parse(kind)]


def create_interpolant(kind: Union[str, InterpolationKind], bases: BasisSet,
                       values: ArrayLike) -> Interpolant:
    """
    Build an interpolant of the given kind.

    Args:
        kind: Interpolation kind or its configuration name
        bases: Shared basis set
        values: One value per basis position

    Returns:
        Interpolant: Fitted interpolant
    """
    return interpolant_class(kind)(bases, values)
