"""Shared fixtures."""

import pytest

from arcpath.domain.path_point import PathPoint, PathPointAdapter
from arcpath.trajectory.builder import Builder
from arcpath.utils.config import config_manager

REFERENCE_PATH = [
    (0.00, 0.00, 0), (0.81, 1.68, 0), (1.65, 2.98, 0), (3.30, 4.01, 1),
    (4.70, 4.52, 1), (6.49, 5.20, 1), (8.11, 6.07, 1), (8.76, 7.23, 1),
    (9.36, 8.74, 1), (10.0, 10.0, 1),
]


def path_point(x: float, y: float, lane_id: int = 0, velocity: float = 0.0) -> PathPoint:
    return PathPoint(x=x, y=y, lane_id=lane_id, longitudinal_velocity_mps=velocity)


@pytest.fixture(autouse=True)
def default_config():
    """Run every test against the default configuration."""
    config_manager.reset()
    yield config_manager
    config_manager.reset()


@pytest.fixture
def path_points():
    return [path_point(x, y, lane_id) for x, y, lane_id in REFERENCE_PATH]


@pytest.fixture
def curve(path_points):
    built = Builder(PathPointAdapter()).build(path_points)
    assert built is not None
    return built
