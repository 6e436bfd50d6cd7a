"""Test interpolant schemes."""

import numpy as np
import pytest

from arcpath.trajectory.bases import BasisSet
from arcpath.trajectory.interpolators import (
    AkimaInterpolant,
    CubicSplineInterpolant,
    InterpolationKind,
    LinearInterpolant,
    StairstepInterpolant,
    create_interpolant,
)


@pytest.mark.parametrize(
    "cls,min_points",
    ((CubicSplineInterpolant, 4), (AkimaInterpolant, 5), (LinearInterpolant, 2), (StairstepInterpolant, 2)),
)
def test_min_points(cls, min_points: int):
    """Check every scheme refuses bases below its minimum."""
    too_small = BasisSet(np.arange(min_points - 1, dtype=float)) if min_points > 2 else None
    if too_small is not None:
        with pytest.raises(ValueError):
            cls(too_small, np.zeros(min_points - 1))
    bases = BasisSet(np.arange(min_points, dtype=float))
    assert len(cls(bases, np.zeros(min_points)).values) == min_points


@pytest.mark.parametrize("cls", (CubicSplineInterpolant, AkimaInterpolant, LinearInterpolant))
def test_passes_through_samples(cls):
    """Check smooth schemes reproduce the samples at the bases."""
    np.random.seed(3)
    nodes = np.sort(np.random.random_sample(8)) * 10
    values = np.random.random_sample(8)
    interpolant = cls(BasisSet(nodes), values)
    assert pytest.approx(values) == interpolant(nodes)


@pytest.mark.parametrize("cls", (CubicSplineInterpolant, AkimaInterpolant, LinearInterpolant))
def test_exact_for_linear(cls):
    """Check linear data is reproduced exactly with a constant slope."""
    nodes = np.array([0.0, 0.7, 1.5, 2.0, 3.1, 4.0])
    interpolant = cls(BasisSet(nodes), 2.0 * nodes + 1.0)
    x = np.linspace(0.0, 4.0, 17)
    assert pytest.approx(2.0 * x + 1.0) == interpolant(x)
    assert pytest.approx(np.full_like(x, 2.0)) == interpolant.derivative(x)
    assert pytest.approx(np.zeros_like(x), abs=1e-9) == interpolant.second_derivative(x)


def test_natural_boundary():
    """Check the cubic spline has zero second derivative at both ends."""
    nodes = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    interpolant = CubicSplineInterpolant(BasisSet(nodes), nodes ** 2)
    assert interpolant.second_derivative(0.0) == pytest.approx(0.0, abs=1e-9)
    assert interpolant.second_derivative(4.0) == pytest.approx(0.0, abs=1e-9)


def test_stairstep_holds_left_sample():
    """Check the stairstep value is the left sample on each segment."""
    interpolant = StairstepInterpolant(BasisSet([0.0, 1.0, 2.0, 3.0]), [5.0, 6.0, 7.0, 8.0])
    assert interpolant(0.0) == 5.0
    assert interpolant(0.99) == 5.0
    assert interpolant(1.0) == 6.0
    assert interpolant(2.5) == 7.0
    assert interpolant(3.0) == 8.0
    assert interpolant.derivative(1.5) == 0.0


def test_queries_clamped():
    """Check queries outside the basis return the end values."""
    interpolant = LinearInterpolant(BasisSet([0.0, 1.0]), [1.0, 3.0])
    assert interpolant(-5.0) == 1.0
    assert interpolant(5.0) == 3.0


def test_scalar_and_array_results():
    """Check scalars give floats and arrays give arrays."""
    interpolant = LinearInterpolant(BasisSet([0.0, 1.0]), [1.0, 3.0])
    assert isinstance(interpolant(0.5), float)
    assert interpolant(np.array([0.25, 0.75])).shape == (2,)


def test_rebuild_validates():
    """Check value arrays must match the basis and be finite."""
    interpolant = LinearInterpolant(BasisSet([0.0, 1.0, 2.0]), [0.0, 1.0, 2.0])
    with pytest.raises(ValueError):
        interpolant.rebuild([0.0, 1.0])
    with pytest.raises(ValueError):
        interpolant.rebuild([0.0, np.inf, 1.0])


def test_sample_keeps_stored_values():
    """Check sampling at existing bases returns the stored values exactly."""
    nodes = np.array([0.0, 1.0, 2.0, 3.0])
    values = np.array([0.1, 0.7, 0.3, 0.9])
    interpolant = CubicSplineInterpolant(BasisSet(nodes), values)
    sampled = interpolant.sample([0.0, 0.5, 1.0, 3.0])
    assert sampled[0] == 0.1
    assert sampled[2] == 0.7
    assert sampled[3] == 0.9


def test_create_by_name():
    """Check interpolants can be created from configuration names."""
    interpolant = create_interpolant("Linear", BasisSet([0.0, 1.0]), [0.0, 1.0])
    assert interpolant.kind is InterpolationKind.LINEAR
    with pytest.raises(ValueError):
        create_interpolant("quintic", BasisSet([0.0, 1.0]), [0.0, 1.0])
