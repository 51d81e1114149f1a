"""Pure-pursuit path following with a PD position loop and a P yaw loop."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from horus_nav.geometry import (
    point_segment_projection,
    quaternion_to_matrix,
    sphere_segment_intersection,
)

Vector = tuple[float, float, float]
Quaternion = tuple[float, float, float, float]

LOOKAHEAD_DISTANCE = 1.0
K_P: Vector = (1.0, 1.0, 1.0)
K_D: Vector = (0.5, 0.5, 0.5)
K_P_YAW = 0.75


def _vec(p: Sequence[float]) -> Vector:
    x, y, z = p
    return (float(x), float(y), float(z))


def _distance(a: Vector, b: Vector) -> float:
    return math.dist(a, b)


@dataclass(frozen=True)
class Pose:
    """Position and orientation quaternion (x, y, z, w) of the drone."""

    position: Vector = (0.0, 0.0, 0.0)
    orientation: Quaternion = (0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True)
class VelocityCommand:
    """Velocity command in the drone frame, with the point being chased."""

    linear: Vector
    yaw_rate: float
    desired_point: Vector


class TrajectoryController:
    """Follows the latest path, restarting whenever a new one arrives."""

    def __init__(self, lookahead_distance: float = LOOKAHEAD_DISTANCE) -> None:
        if lookahead_distance <= 0:
            raise ValueError(
                f"lookahead distance must be positive, got {lookahead_distance}"
            )
        self._lookahead = float(lookahead_distance)
        self._pose = Pose()
        self._path: list[Vector] | None = None
        self._prev_desired: Vector = (0.0, 0.0, 0.0)
        self._prev_current: Vector = (0.0, 0.0, 0.0)
        self._prev_desired_yaw = 0.0

    def update_pose(self, pose: Pose) -> None:
        """Record the latest drone pose."""
        self._pose = pose

    def update_path(self, path: Sequence[Sequence[float]]) -> None:
        """Replace the path being followed."""
        points = [_vec(p) for p in path]
        if not points:
            raise ValueError("path must contain at least one point")
        self._path = points

    def _segments(self) -> list[tuple[Vector, Vector]]:
        assert self._path is not None
        return [(a, b) for a, b in zip(self._path, self._path[1:]) if a != b]

    def _desired_point(self, current: Vector) -> Vector:
        assert self._path is not None
        segments = self._segments()
        furthest: Vector | None = None
        for p0, p1 in segments:
            hits = sphere_segment_intersection(p0, p1, current, self._lookahead)
            if len(hits) == 2:
                furthest = min(hits, key=lambda h: _distance(h, p1))
            elif len(hits) == 1:
                furthest = hits[0]
        if furthest is not None:
            return furthest

        end = self._path[-1]
        if _distance(end, current) <= self._lookahead:
            return end

        # no intersection: head for the nearest point of the path
        nearest = end
        best = math.inf
        for p0, p1 in segments:
            projected = point_segment_projection(current, p0, p1)
            d = _distance(current, projected)
            if d < best:
                best, nearest = d, projected
        gap = _distance(nearest, current)
        if gap == 0:
            return nearest
        return tuple(  # type: ignore[return-value]
            c + (n - c) / gap * self._lookahead for c, n in zip(current, nearest)
        )

    def compute_command(self) -> VelocityCommand | None:
        """Velocity command towards the path, or None while no path is known."""
        if self._path is None:
            return None
        current = _vec(self._pose.position)
        desired = self._desired_point(current)

        d_desired = [d - p for d, p in zip(desired, self._prev_desired)]
        d_current = [c - p for c, p in zip(current, self._prev_current)]
        command_world = [
            kp * (d - c) + kd * (dd - dc)
            for kp, kd, d, c, dd, dc in zip(K_P, K_D, desired, current, d_desired, d_current)
        ]

        qx, qy, qz, qw = (float(c) for c in self._pose.orientation)
        norm = math.sqrt(qx * qx + qy * qy + qz * qz + qw * qw)
        if norm == 0:
            raise ValueError("orientation quaternion has zero length")
        rot = quaternion_to_matrix((qx / norm, qy / norm, qz / norm, qw / norm))
        cx, cy, cz = (
            sum(rot[j][i] * command_world[j] for j in range(3)) for i in range(3)
        )

        if len(self._path) > 1:
            desired_yaw = math.atan2(-(desired[0] - current[0]), desired[1] - current[1])
        else:
            desired_yaw = self._prev_desired_yaw
        current_yaw = math.atan2(-rot[0][0], rot[1][0])
        error = desired_yaw - current_yaw
        if error > math.pi:
            error -= 2 * math.pi
        elif error < -math.pi:
            error += 2 * math.pi

        self._prev_desired = desired
        self._prev_current = current
        self._prev_desired_yaw = desired_yaw
        return VelocityCommand((cx, -cy, cz), K_P_YAW * error, desired)