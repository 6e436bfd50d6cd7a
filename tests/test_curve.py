"""Test curve queries."""

import math

import numpy as np
import pytest

from arcpath.domain.path_point import PathPoint
from arcpath.geo.coordinates import Point2D, Point3D
from arcpath.trajectory.builder import build


def test_compute(curve):
    """Check a point in the middle lies inside the path extent and keeps its lane."""
    length = curve.length()
    curve["longitudinal_velocity_mps"].range(length / 3.0, length).set(10.0)
    point = curve.compute(length / 2.0)

    assert isinstance(point, PathPoint)
    assert 0.0 < point.x < 10.0
    assert 0.0 < point.y < 10.0
    assert point.lane_id == 1
    assert point.longitudinal_velocity_mps == 10.0


def test_direction(curve):
    """Check the initial direction points into the first quadrant."""
    direction = curve.azimuth(0.0)
    assert 0.0 < direction < math.pi / 2
    assert curve.direction(0.0) == direction
    assert curve.compute(0.0).heading == pytest.approx(direction)


def test_curvature_bounded(curve):
    """Check the curvature at the start is moderate."""
    assert -1.0 < curve.curvature(0.0) < 1.0


def test_straight_line_queries():
    """Check direction and curvature on a straight diagonal."""
    curve = build([(0.0, 0.0), (1.0, 1.0), (2.0, 2.0), (3.0, 3.0)])
    s = np.linspace(0.0, curve.length(), 9)
    assert pytest.approx(np.full_like(s, math.pi / 4)) == curve.azimuth(s)
    assert pytest.approx(np.zeros_like(s), abs=1e-9) == curve.curvature(s)
    assert curve.elevation(1.0) == 0.0


def test_circle_curvature():
    """Check curvature on a densely sampled circle matches the inverse radius."""
    radius = 5.0
    angles = np.linspace(0.0, math.pi, 180)
    curve = build([(radius * math.cos(a), radius * math.sin(a)) for a in angles])
    middle = curve.length() / 2.0
    assert curve.curvature(middle) == pytest.approx(1.0 / radius, rel=1e-3)


def test_position_shapes(curve):
    """Check scalar queries give one row and array queries one row per position."""
    assert curve.position(1.0).shape == (3,)
    assert curve.position([0.0, 1.0, 2.0]).shape == (3, 3)


def test_position_clamped(curve):
    """Check queries outside the curve return the end points."""
    assert pytest.approx(curve.position(-1.0)[:2]) == [0.0, 0.0]
    assert pytest.approx(curve.position(curve.length() + 5.0)[:2]) == [10.0, 10.0]


def test_elevation():
    """Check the pitch of a constant ramp."""
    curve = build([Point3D(0, 0, 0), Point3D(1, 0, 1), Point3D(2, 0, 2), Point3D(3, 0, 3)])
    assert curve.has_elevation
    assert curve.elevation(1.0) == pytest.approx(math.pi / 4)
    assert isinstance(curve.compute(1.0), Point3D)


def test_planar_points_created():
    """Check curves without fields create plain points."""
    curve = build([(0.0, 0.0), (2.0, 0.0)])
    point = curve.compute(1.0)
    assert isinstance(point, Point2D)
    assert point.x == pytest.approx(1.0)
    assert point.y == pytest.approx(0.0)


def test_structure(curve):
    """Check dimensions and field names."""
    assert curve.dimensions == ["x", "y", "z"]
    assert set(curve.field_names) == {
        "longitudinal_velocity_mps", "lateral_velocity_mps", "heading_rate_rps", "lane_id"
    }
    with pytest.raises(KeyError):
        curve.interpolant("speed")


def test_sample(curve):
    """Check samples carry coordinates, fields and heading."""
    sample = curve.sample(0.0)
    assert sample.x == pytest.approx(0.0)
    assert sample.fields["lane_id"] == 0.0
    assert sample.heading == pytest.approx(curve.azimuth(0.0))


def test_add_field(curve):
    """Check new fields start constant and names cannot be reused."""
    overlay = curve.add_field("curvature_limit", 0.2)
    assert overlay(curve.length() / 2.0) == 0.2
    assert "curvature_limit" in curve.field_names

    with pytest.raises(ValueError):
        curve.add_field("x")
    with pytest.raises(ValueError):
        curve.add_field("lane_id")


def test_copy_is_independent(curve):
    """Check mutations of a copy leave the original untouched."""
    snapshot = curve.copy()
    snapshot.crop(1.0, 2.0)
    snapshot["longitudinal_velocity_mps"] = 3.0

    assert snapshot.length() == 2.0
    assert curve.length() > 2.0
    assert curve.value("longitudinal_velocity_mps", 1.0) == 0.0
