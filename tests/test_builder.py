"""Test curve construction."""

import logging

import numpy as np
import pytest

from arcpath.domain.path_point import PathPointAdapter
from arcpath.geo.coordinates import Point2D, Point3D
from arcpath.trajectory.builder import Builder, build
from arcpath.trajectory.interpolators import InterpolationKind

from conftest import path_point


def test_single_point_fails():
    """Check a single point never yields a curve."""
    assert Builder(PathPointAdapter()).build([path_point(0.0, 0.0)]) is None
    assert Builder().build([]) is None


def test_four_points_succeed():
    """Check a short path builds."""
    points = [path_point(0.00, 0.00, 0), path_point(0.81, 1.68, 0),
              path_point(1.65, 2.98, 0), path_point(3.30, 4.01, 1)]
    curve = Builder(PathPointAdapter()).build(points)
    assert curve is not None
    assert curve.length() > 0.0


def test_two_points_densified():
    """Check two points are densified up to the cubic minimum."""
    curve = build([(0.0, 0.0), (4.0, 3.0)])
    assert curve is not None
    assert len(curve.bases) == 4
    assert curve.length() == pytest.approx(5.0)
    assert pytest.approx(curve.position(2.5)) == [2.0, 1.5]


def test_min_points_override():
    """Check an explicit minimum density is honored."""
    curve = Builder(min_points=25).build([(0.0, 0.0), (1.0, 0.0), (2.0, 1.0)])
    assert len(curve.bases) == 25


def test_arc_length_is_cumulative_distance(path_points):
    """Check the length equals the polyline length of the input."""
    xy = np.array([(p.x, p.y) for p in path_points])
    expected = np.sum(np.linalg.norm(np.diff(xy, axis=0), axis=1))
    curve = Builder(PathPointAdapter()).build(path_points)
    assert curve.length() == pytest.approx(expected)


def test_three_dimensional_input():
    """Check elevation becomes a dimension only when every point has it."""
    curve = build([Point3D(0, 0, 0), Point3D(3, 0, 4), Point3D(6, 0, 8)])
    assert curve.dimensions == ["x", "y", "z"]
    assert curve.length() == pytest.approx(10.0)

    mixed = build([Point3D(0, 0, 0), Point2D(3, 0), Point3D(6, 0, 8)])
    assert mixed.dimensions == ["x", "y"]


def test_duplicates_dropped():
    """Check consecutive duplicates do not break construction."""
    curve = build([(0.0, 0.0), (0.0, 0.0), (1.0, 0.0), (1.0, 0.0), (2.0, 0.0)])
    assert curve is not None
    assert curve.length() == pytest.approx(2.0)


def test_all_duplicates_fail():
    """Check a path collapsing to one point fails."""
    assert build([(1.0, 1.0), (1.0, 1.0), (1.0, 1.0)]) is None


def test_invalid_points_fail(caplog):
    """Check extraction failures and non-finite values yield None with a warning."""
    with caplog.at_level(logging.WARNING, logger="arcpath"):
        assert build([(0.0, 0.0), "not a point"]) is None
        assert build([(0.0, 0.0), (np.nan, 1.0)]) is None
    assert "Cannot build curve" in caplog.text


def test_field_kinds(path_points):
    """Check field interpolation follows the adapter unless overridden."""
    curve = Builder(PathPointAdapter()).build(path_points)
    assert curve.interpolant("lane_id").kind is InterpolationKind.STAIRSTEP
    assert curve.interpolant("x").kind is InterpolationKind.CUBIC

    builder = Builder(PathPointAdapter(), geometry_kind="akima",
                      field_kinds={"longitudinal_velocity_mps": "linear"})
    curve = builder.build(path_points)
    assert curve.interpolant("x").kind is InterpolationKind.AKIMA
    assert curve.interpolant("longitudinal_velocity_mps").kind is InterpolationKind.LINEAR


def test_configured_geometry_kind(default_config, path_points):
    """Check the configured geometry interpolation is used by default."""
    default_config.set("trajectory", "geometry_interpolation", "linear")
    curve = Builder(PathPointAdapter()).build(path_points)
    assert curve.interpolant("y").kind is InterpolationKind.LINEAR


def test_densified_fields_hold_left_value():
    """Check densified stairstep samples copy the preceding input value."""
    points = [path_point(0.0, 0.0, 1, velocity=2.0), path_point(3.0, 0.0, 2, velocity=4.0)]
    curve = Builder(PathPointAdapter()).build(points)
    assert list(curve["longitudinal_velocity_mps"].values) == [2.0, 2.0, 2.0, 4.0]
    assert curve.compute(1.5).lane_id == 1
