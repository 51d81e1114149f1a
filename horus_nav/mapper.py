"""Builds a voxel map from point clouds matched to drone poses by timestamp."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

from horus_nav.chunk import VoxelState
from horus_nav.geometry import quaternion_to_matrix
from horus_nav.voxel_grid import VoxelGrid

Vector = tuple[float, float, float]
Quaternion = tuple[float, float, float, float]

BUFFER_SIZE = 20
FLOOR_HEIGHT = 0.25

_log = logging.getLogger(__name__)


def _vec(p: Sequence[float]) -> Vector:
    x, y, z = p
    return (float(x), float(y), float(z))


@dataclass(frozen=True)
class PointCloud:
    """Points in the camera frame, stamped with their capture time in seconds."""

    stamp: float
    points: tuple[Vector, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(_vec(p) for p in self.points))


class VoxelMapper:
    """Marks voxels hit by point-cloud points as occupied."""

    def __init__(
        self,
        voxel_grid: VoxelGrid,
        buffer_size: int = BUFFER_SIZE,
        floor_height: float = FLOOR_HEIGHT,
    ) -> None:
        if buffer_size <= 0:
            raise ValueError(f"buffer size must be positive, got {buffer_size}")
        self._grid = voxel_grid
        self._floor_height = float(floor_height)
        self._buffer: deque[PointCloud] = deque(maxlen=buffer_size)
        self._cloud: PointCloud | None = None
        self._position: Vector = (0.0, 0.0, 0.0)
        self._orientation: Quaternion = (0.0, 0.0, 0.0, 1.0)
        self._points_start: float | None = None
        self._pose_start: float | None = None
        self._lock = threading.Lock()

    @property
    def ready(self) -> bool:
        """Whether both a cloud and a pose have been received."""
        return self._points_start is not None and self._pose_start is not None

    @property
    def cloud(self) -> PointCloud | None:
        """The cloud currently matched to the latest pose."""
        return self._cloud

    def on_points(self, cloud: PointCloud) -> None:
        """Buffer a new cloud; the oldest is dropped once the buffer is full."""
        with self._lock:
            self._buffer.appendleft(cloud)
            if self._points_start is None:
                self._points_start = cloud.stamp

    def on_pose(
        self, stamp: float, position: Sequence[float], orientation: Sequence[float]
    ) -> None:
        """Record a pose and select the buffered cloud closest to it in time."""
        with self._lock:
            self._position = _vec(position)
            qx, qy, qz, qw = (float(c) for c in orientation)
            self._orientation = (qx, qy, qz, qw)
            if self._pose_start is None:
                self._pose_start = stamp
            self._match(stamp)

    def _match(self, stamp: float) -> None:
        offset = (self._points_start or 0.0) - (self._pose_start or 0.0)
        best: PointCloud | None = None
        smallest = math.inf
        for cloud in self._buffer:
            diff = abs(stamp - cloud.stamp) + offset
            if diff < smallest:
                smallest, best = diff, cloud
        if best is None:
            _log.warning("no valid point cloud found in buffer")
        else:
            self._cloud = best

    def process_points(self) -> int:
        """Place the matched cloud in the world and mark its points occupied.

        Points at or below the floor height are skipped. Returns the number
        of points marked.
        """
        began = time.perf_counter()
        marked = 0
        with self._lock:
            if self._cloud is None:
                return 0
            rot = quaternion_to_matrix(self._orientation)
            for point in self._cloud.points:
                world = tuple(
                    sum(r * p for r, p in zip(row, point)) + offset
                    for row, offset in zip(rot, self._position)
                )
                if world[2] > self._floor_height:
                    self._grid.set_voxel_state(world, VoxelState.OCCUPIED)
                    marked += 1
        _log.info("points processed in %f sec", time.perf_counter() - began)
        return marked

    def inflate_from_index(
        self, global_indices: Sequence[int], max_iterations: int
    ) -> None:
        """Mark empty neighbours occupied, spreading out up to max_iterations steps."""
        self._inflate(tuple(global_indices), 0, max_iterations)

    def _inflate(self, indices: Sequence[int], counter: int, max_iterations: int) -> None:
        if counter > max_iterations:
            return
        for neighbor in self._grid.empty_neighbors(indices):
            self._grid.set_voxel_state(
                self._grid.global_to_world(neighbor), VoxelState.OCCUPIED
            )
            self._inflate(neighbor, counter + 1, max_iterations)

    def occupied_voxels(self) -> list[Vector]:
        """World centres of every occupied voxel in the grid."""
        return [
            centre
            for centre in self._grid.iter_voxels()
            if self._grid.get_voxel_state(centre) is VoxelState.OCCUPIED
        ]