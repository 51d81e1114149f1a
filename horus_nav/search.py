"""Path search over a voxel grid, confined to a cubic region around the start."""

from __future__ import annotations

import heapq
import logging
import math
import struct
import time
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

from horus_nav.chunk import VoxelState
from horus_nav.voxel_grid import VoxelGrid

IntVec = tuple[int, int, int]
Point = tuple[float, float, float]

LOCAL_REGION_SIZE = 32

_log = logging.getLogger(__name__)
_F32 = struct.Struct("f")


def _f32(value: float) -> float:
    """Round a float to the nearest single-precision value."""
    return _F32.unpack(_F32.pack(value))[0]


def _point(p: Sequence[float]) -> Point:
    x, y, z = p
    return (float(x), float(y), float(z))


def _index(p: Sequence[int]) -> IntVec:
    x, y, z = p
    return (int(x), int(y), int(z))


class CameFrom:
    """Parent links for the voxels of a dense box of the given dimensions."""

    __slots__ = ("_dims", "_parents")

    def __init__(self, dims: Sequence[int]) -> None:
        checked = _index(dims)
        if min(checked) <= 0:
            raise ValueError(f"dimensions must be positive, got {checked}")
        self._dims = checked
        self._parents: dict[IntVec, IntVec] = {}

    @property
    def dims(self) -> IntVec:
        """Size of the box along each axis."""
        return self._dims

    def _checked(self, index: Sequence[int]) -> IntVec:
        key = _index(index)
        if not all(0 <= c < d for c, d in zip(key, self._dims)):
            raise IndexError(f"index {key} outside box of size {self._dims}")
        return key

    def at(self, index: Sequence[int]) -> IntVec | None:
        """Parent of ``index``, or None if it has not been reached."""
        return self._parents.get(self._checked(index))

    def set(self, index: Sequence[int], parent: Sequence[int]) -> None:
        """Record ``parent`` as the voxel ``index`` was reached from."""
        self._parents[self._checked(index)] = self._checked(parent)


@dataclass(frozen=True)
class _Region:
    """Cube of voxels centred on the start voxel, indexed from zero."""

    size: int
    offset: IntVec

    @classmethod
    def around(cls, voxel_grid: VoxelGrid, start: Point, size: int) -> _Region:
        if int(size) != size or size <= 0:
            raise ValueError(f"local region size must be a positive integer, got {size}")
        size = int(size)
        half = size // 2
        gx, gy, gz = voxel_grid.world_to_global(start)
        return cls(size, (gx - half, gy - half, gz - half))

    @property
    def start(self) -> IntVec:
        half = self.size // 2
        return (half, half, half)

    def to_local(self, global_indices: Sequence[int]) -> IntVec:
        x, y, z = (g - o for g, o in zip(global_indices, self.offset))
        return (x, y, z)

    def to_global(self, local_indices: Sequence[int]) -> IntVec:
        x, y, z = (c + o for c, o in zip(local_indices, self.offset))
        return (x, y, z)

    def contains(self, local_indices: Sequence[int]) -> bool:
        return all(0 <= c < self.size for c in local_indices)


def _trace_back(
    voxel_grid: VoxelGrid,
    region: _Region,
    came_from: CameFrom,
    last: IntVec,
    goal_local: IntVec,
    start: Point,
    goal: Point,
) -> list[Point]:
    """Follow parent links from ``last`` back to the start voxel; returns start -> end."""
    path: list[Point] = []
    current = last
    while True:
        if current == goal_local:
            path.append(goal)
        else:
            path.append(voxel_grid.global_to_world(region.to_global(current)))
        parent = came_from.at(current)
        if parent is None:
            raise RuntimeError(f"voxel {current} has no recorded parent")
        current = parent
        if current == region.start:
            break
    path.append(start)
    path.reverse()
    return path


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Distance between two points, computed in single precision."""
    total = 0.0
    for x, y in zip(a, b):
        diff = _f32(_f32(x) - _f32(y))
        total = _f32(total + _f32(diff * diff))
    return _f32(math.sqrt(total))


def run_breadth_first(
    voxel_grid: VoxelGrid,
    start: Sequence[float],
    goal: Sequence[float],
    local_region_size: int = LOCAL_REGION_SIZE,
) -> list[Point] | None:
    """Breadth-first path from start to goal inside the local region.

    Returns None when the goal cannot be reached inside the region.
    """
    start_pt, goal_pt = _point(start), _point(goal)
    region = _Region.around(voxel_grid, start_pt, local_region_size)
    came_from = CameFrom((region.size,) * 3)
    goal_local = region.to_local(voxel_grid.world_to_global(goal_pt))
    came_from.set(region.start, region.start)

    frontier: deque[IntVec] = deque([region.start])
    while frontier:
        current = frontier.popleft()
        if current == goal_local:
            break
        for next_global in voxel_grid.empty_neighbors(region.to_global(current)):
            next_local = region.to_local(next_global)
            if region.contains(next_local) and came_from.at(next_local) is None:
                frontier.append(next_local)
                came_from.set(next_local, current)

    if not region.contains(goal_local) or came_from.at(goal_local) is None:
        return None
    if goal_local == region.start:
        return [start_pt]
    return _trace_back(
        voxel_grid, region, came_from, goal_local, goal_local, start_pt, goal_pt
    )


def run_a_star(
    voxel_grid: VoxelGrid,
    start: Sequence[float],
    goal: Sequence[float],
    local_region_size: int = LOCAL_REGION_SIZE,
) -> list[Point]:
    """A* path from start towards goal inside the local region.

    When the search reaches the region's wall, or runs out of voxels, the
    path ends at the last voxel reached instead of the goal.
    """
    start_pt, goal_pt = _point(start), _point(goal)
    region = _Region.around(voxel_grid, start_pt, local_region_size)
    came_from = CameFrom((region.size,) * 3)
    goal_local = region.to_local(voxel_grid.world_to_global(goal_pt))
    came_from.set(region.start, region.start)

    frontier: list[tuple[float, IntVec]] = [(0.0, region.start)]
    last = region.start
    while frontier:
        _, current = heapq.heappop(frontier)
        if current == goal_local:
            last = goal_local
            break
        for next_global in voxel_grid.empty_neighbors(region.to_global(current)):
            next_local = region.to_local(next_global)
            if not region.contains(next_local):
                # reached the wall of the local region: stop here
                frontier.clear()
                last = current
                break
            if came_from.at(next_local) is None:
                next_world = voxel_grid.global_to_world(next_global)
                cost = _f32(
                    euclidean_distance(start_pt, next_world)
                    + euclidean_distance(goal_pt, next_world)
                )
                heapq.heappush(frontier, (cost, next_local))
                came_from.set(next_local, current)
                last = next_local

    return _trace_back(
        voxel_grid, region, came_from, last, goal_local, start_pt, goal_pt
    )


def run_search(
    voxel_grid: VoxelGrid, start: Sequence[float], goal: Sequence[float]
) -> list[Point] | None:
    """Plan a path with A*; None if the start itself lies in an occupied voxel."""
    _log.debug("search starting")
    began = time.perf_counter()
    if voxel_grid.get_voxel_state(start) == VoxelState.OCCUPIED:
        return None
    path = run_a_star(voxel_grid, start, goal, LOCAL_REGION_SIZE)
    _log.debug("search finished in %f sec", time.perf_counter() - began)
    return path


def clean_path(voxel_grid: VoxelGrid, path: Sequence[Sequence[float]]) -> list[Point]:
    """Drop waypoints that a clear line of sight lets the path skip.

    Returns a new list; the given path is left untouched.
    """
    began = time.perf_counter()
    cleaned = [_point(p) for p in path]
    if len(cleaned) <= 1:
        return cleaned

    i = 0
    while i < len(cleaned) - 1:
        current = cleaned[i]
        j = i + 1
        while True:
            candidate = cleaned[j]
            if candidate == cleaned[-1]:
                if not voxel_grid.check_collision(current, candidate):
                    del cleaned[i + 1 : j]
                    _log.debug("clean path finished in %f sec", time.perf_counter() - began)
                    return cleaned
                break
            if voxel_grid.check_collision(current, candidate):
                break
            j += 1
        if j - i != 1:
            del cleaned[i + 1 : j - 1]
        i += 1
    _log.debug("clean path finished in %f sec", time.perf_counter() - began)
    return cleaned