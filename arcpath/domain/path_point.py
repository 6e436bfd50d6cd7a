"""
Path point definitions.

``PathPoint`` is the planning-side point type trajectories are usually built
from: a pose, velocity commands and the lane the point belongs to.
``PathPointAdapter`` connects it to the curve library.
"""

import math
from dataclasses import dataclass
from typing import Dict

from arcpath.trajectory.adapters import PointAdapter, PointFields
from arcpath.trajectory.interpolators import InterpolationKind


@dataclass
class PathPoint:
    """
    Point of a planned path.

    Attributes:
        x, y, z: Position in meters
        heading: Yaw in radians (0 is east, pi/2 is north)
        longitudinal_velocity_mps: Commanded forward speed
        lateral_velocity_mps: Commanded lateral speed
        heading_rate_rps: Commanded yaw rate
        lane_id: Lane the point belongs to
    """
    x: float
    y: float
    z: float = 0.0
    heading: float = 0.0
    longitudinal_velocity_mps: float = 0.0
    lateral_velocity_mps: float = 0.0
    heading_rate_rps: float = 0.0
    lane_id: int = 0

    @property
    def heading_degrees(self) -> float:
        return math.degrees(self.heading)


class PathPointAdapter(PointAdapter):
    """
    Adapter between ``PathPoint`` and curves.

    Velocities and lane ids are held constant between samples. The heading
    is not stored; created points take the curve azimuth.
    """

    FIELD_KINDS: Dict[str, InterpolationKind] = {
        "longitudinal_velocity_mps": InterpolationKind.STAIRSTEP,
        "lateral_velocity_mps": InterpolationKind.STAIRSTEP,
        "heading_rate_rps": InterpolationKind.STAIRSTEP,
        "lane_id": InterpolationKind.STAIRSTEP,
    }

    def extract(self, point: PathPoint) -> PointFields:
        return PointFields(
            x=point.x,
            y=point.y,
            z=point.z,
            fields={
                "longitudinal_velocity_mps": point.longitudinal_velocity_mps,
                "lateral_velocity_mps": point.lateral_velocity_mps,
                "heading_rate_rps": point.heading_rate_rps,
                "lane_id": float(point.lane_id),
            },
        )

    def create(self, fields: PointFields) -> PathPoint:
        values = fields.fields
        return PathPoint(
            x=fields.x,
            y=fields.y,
            z=fields.z if fields.z is not None else 0.0,
            heading=fields.heading if fields.heading is not None else 0.0,
            longitudinal_velocity_mps=values.get("longitudinal_velocity_mps", 0.0),
            lateral_velocity_mps=values.get("lateral_velocity_mps", 0.0),
            heading_rate_rps=values.get("heading_rate_rps", 0.0),
            lane_id=int(round(values.get("lane_id", 0.0))),
        )
