"""Test cropping, restoring and resampling."""

import numpy as np
import pytest

from arcpath.algorithms.closest import closest
from arcpath.domain.path_point import PathPointAdapter
from arcpath.trajectory.bases import uniform
from arcpath.trajectory.builder import Builder
from arcpath.trajectory.curve import RangeError


def test_crop(curve):
    """Check a crop keeps the boundary points and rebases to zero."""
    length = curve.length()
    start_expect = curve.compute(length / 3.0)
    end_expect = curve.compute(length / 3.0 + 1.0)

    curve.crop(length / 3.0, 1.0)

    assert curve.length() == 1.0
    assert curve.bases[0] == 0.0

    start_actual = curve.compute(0.0)
    end_actual = curve.compute(curve.length())

    assert start_actual.x == pytest.approx(start_expect.x, abs=1e-9)
    assert start_actual.y == pytest.approx(start_expect.y, abs=1e-9)
    assert start_actual.lane_id == start_expect.lane_id
    assert end_actual.x == pytest.approx(end_expect.x, abs=1e-9)
    assert end_actual.y == pytest.approx(end_expect.y, abs=1e-9)
    assert end_actual.lane_id == end_expect.lane_id


def test_crop_full_length(curve):
    """Check cropping to the full length keeps the geometry."""
    length = curve.length()
    bases = curve.bases
    positions = curve.position(bases)

    curve.crop(0.0, length)

    assert curve.length() == length
    assert pytest.approx(positions, abs=1e-9) == curve.position(bases)


def test_crop_preserves_fields(curve):
    """Check field values survive the shift."""
    curve["longitudinal_velocity_mps"].range(2.0, 6.0).set(4.0)
    curve.crop(1.0, 8.0)

    velocity = curve["longitudinal_velocity_mps"]
    assert velocity(0.5) == 0.0
    assert velocity(1.0) == 4.0
    assert velocity(4.9) == 4.0
    assert velocity(5.0) == 0.0


def test_crop_short_segment_densified(curve):
    """Check a crop inside a single segment still has enough samples for a spline."""
    curve.crop(0.1, 0.2)
    assert len(curve.bases) >= 4
    assert curve.length() == 0.2


def test_crop_chain(curve):
    """Check crops compose."""
    curve.crop(2.0, 10.0).crop(1.0, 5.0)
    assert curve.length() == 5.0


@pytest.mark.parametrize("start,length", ((-0.5, 1.0), (1.0, 0.0), (1.0, -2.0), (5.0, 100.0)))
def test_crop_invalid(curve, start: float, length: float):
    """Check out-of-range crops fail instead of clamping."""
    original = curve.length()
    with pytest.raises(RangeError):
        curve.crop(start, length)
    assert curve.length() == original


def test_crop_past_end_within_tolerance(curve):
    """Check a crop starting at the end fails even inside the boundary tolerance."""
    original = curve.length()
    with pytest.raises(RangeError):
        curve.crop(original, 5e-10)
    with pytest.raises(RangeError):
        curve.crop(original + 1e-10, 1e-10)
    assert curve.length() == original


def test_restore(curve):
    """Check restoring returns one point per basis sample."""
    curve["longitudinal_velocity_mps"].range(4.0, curve.length()).set(5.0)
    points = curve.restore(0)

    assert len(points) == 11
    assert points[-1].longitudinal_velocity_mps == 5.0
    assert points[0].longitudinal_velocity_mps == 0.0


def test_restore_densified(curve):
    """Check a minimum point count densifies the output."""
    assert len(curve.restore(40)) == 40


def test_round_trip(curve):
    """Check rebuilding from restored points reproduces the geometry."""
    rebuilt = Builder(PathPointAdapter()).build(curve.restore(0))

    assert rebuilt.length() == pytest.approx(curve.length())
    s = curve.bases
    assert pytest.approx(curve.position(s), abs=1e-9) == rebuilt.position(s)
    assert list(rebuilt["lane_id"].values) == list(curve["lane_id"].values)


def test_round_trip_densified(curve):
    """Check a densified round trip stays close to the original path."""
    rebuilt = Builder(PathPointAdapter()).build(curve.restore(50))
    assert rebuilt.length() == pytest.approx(curve.length(), rel=5e-2)

    for s in np.linspace(0.0, rebuilt.length(), 30):
        point = rebuilt.position(s)[:2]
        nearest = curve.position(closest(curve, point))[:2]
        assert np.linalg.norm(point - nearest) < 1e-2


def test_resample(curve):
    """Check resampling ends exactly at the curve end."""
    points = curve.resample(1.0)
    end = curve.compute(curve.length())

    assert len(points) == len(uniform(curve.length(), 1.0, 0.1))
    assert points[-1].x == pytest.approx(end.x)
    assert points[-1].y == pytest.approx(end.y)

    with pytest.raises(ValueError):
        curve.resample(0.0)
