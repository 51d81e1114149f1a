"""Sparse voxel map made of fixed-size chunks."""

from __future__ import annotations

import itertools
import math
from collections.abc import Iterator, Sequence

from horus_nav.chunk import Chunk, VoxelState

IntVec = tuple[int, int, int]
FloatVec = tuple[float, float, float]

# Largest finite single-precision value; marks an axis the ray never crosses.
FLT_MAX = 3.4028234663852886e38
_MAX_TRAVERSAL_STEPS = 1000
_EPSILON = 1e-5

_NEIGHBOR_OFFSETS: tuple[IntVec, ...] = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)


def _nearly_equal(a: float, b: float) -> bool:
    return abs(a - b) < _EPSILON


class VoxelGrid:
    """Unbounded voxel grid; voxels in chunks never created read as empty."""

    RES = 16

    def __init__(self, scale: float = 1.0) -> None:
        if scale <= 0:
            raise ValueError(f"voxel scale must be positive, got {scale}")
        self._scale = float(scale)
        self._map: dict[IntVec, Chunk] = {(0, 0, 0): Chunk(self.RES)}

    @property
    def scale(self) -> float:
        """Edge length of one voxel in world units."""
        return self._scale

    @property
    def num_chunks(self) -> int:
        """Number of chunks allocated so far."""
        return len(self._map)

    def world_to_global(self, position: Sequence[float]) -> IntVec:
        """World coordinates to global voxel indices."""
        x, y, z = (math.floor(c / self._scale) for c in position)
        return (x, y, z)

    def global_to_world(self, global_indices: Sequence[int]) -> FloatVec:
        """Global voxel indices to the world coordinates of the voxel centre."""
        x, y, z = ((i + 0.5) * self._scale for i in global_indices)
        return (x, y, z)

    def global_to_local(self, global_indices: Sequence[int]) -> tuple[IntVec, IntVec]:
        """Split global indices into chunk indices and indices within the chunk."""
        cx, cy, cz = (i // self.RES for i in global_indices)
        lx, ly, lz = (i % self.RES for i in global_indices)
        return (cx, cy, cz), (lx, ly, lz)

    def local_to_global(
        self, chunk_indices: Sequence[int], local_indices: Sequence[int]
    ) -> IntVec:
        """Combine chunk indices and local indices into global indices."""
        x, y, z = (c * self.RES + l for c, l in zip(chunk_indices, local_indices))
        return (x, y, z)

    def _state_at_global(self, global_indices: Sequence[int]) -> VoxelState:
        chunk_key, local = self.global_to_local(global_indices)
        chunk = self._map.get(chunk_key)
        if chunk is None:
            return VoxelState.EMPTY
        return chunk.get_voxel_state(local)

    def _set_global(self, global_indices: Sequence[int], state: VoxelState) -> None:
        chunk_key, local = self.global_to_local(global_indices)
        chunk = self._map.get(chunk_key)
        if chunk is None:
            chunk = self._map[chunk_key] = Chunk(self.RES)
        chunk.set_voxel_state(local, state)

    def get_voxel_state(self, position: Sequence[float]) -> VoxelState:
        """State of the voxel containing the world position."""
        return self._state_at_global(self.world_to_global(position))

    def set_voxel_state(self, position: Sequence[float], state: VoxelState) -> None:
        """Set the voxel containing the world position, creating its chunk if needed."""
        self._set_global(self.world_to_global(position), state)

    def add_obstacle(self, xyz_min: Sequence[float], xyz_max: Sequence[float]) -> None:
        """Mark as occupied every voxel of the grid-aligned box covering the bounds."""
        lo = [math.floor(c / self._scale) for c in xyz_min]
        hi = [math.ceil(c / self._scale) for c in xyz_max]
        ranges = (range(start, stop) for start, stop in zip(lo, hi))
        for indices in itertools.product(*ranges):
            self._set_global(indices, VoxelState.OCCUPIED)

    def empty_neighbors(self, global_indices: Sequence[int]) -> list[IntVec]:
        """Face neighbours (+x, -x, +y, -y, +z, -z order) that are empty."""
        gx, gy, gz = global_indices
        neighbors = []
        for dx, dy, dz in _NEIGHBOR_OFFSETS:
            neighbor = (gx + dx, gy + dy, gz + dz)
            if self._state_at_global(neighbor) is VoxelState.EMPTY:
                neighbors.append(neighbor)
        return neighbors

    def check_collision(self, point1: Sequence[float], point2: Sequence[float]) -> bool:
        """Whether the segment between the points passes through an occupied voxel.

        Walks the voxels along the segment (Amanatides & Woo); the voxel of
        ``point1`` itself is not tested. Raises RuntimeError if the walk does
        not finish within 1000 steps.
        """
        a = [float(c) for c in point1]
        b = [float(c) for c in point2]
        diff = [bi - ai for ai, bi in zip(a, b)]
        length = math.sqrt(sum(d * d for d in diff))
        voxel_a = self.world_to_global(a)
        voxel_b = self.world_to_global(b)
        if length == 0:
            return False
        direction = [d / length for d in diff]
        steps = [(d > 0) - (d < 0) for d in direction]
        center = self.global_to_world(voxel_a)

        t_max: list[float] = []
        t_delta: list[float] = []
        for v, step, c, start in zip(direction, steps, center, a):
            if v == 0:
                t_max.append(FLT_MAX)
                t_delta.append(math.inf)
            else:
                boundary = c + step * self._scale / 2
                t_max.append(abs((boundary - start) / v))
                t_delta.append(abs(self._scale / v))

        current = list(voxel_a)
        count = 0
        while True:
            tx, ty, tz = t_max
            # all boundaries crossed together: the end point lies on a voxel corner
            if _nearly_equal(tx, ty) and _nearly_equal(tx, tz):
                return False
            if tuple(current) == voxel_b:
                return False
            if tx < ty and tx < tz:
                axis = 0
            elif ty < tz:
                axis = 1
            else:
                axis = 2
            t_max[axis] += t_delta[axis]
            current[axis] += steps[axis]
            if count == _MAX_TRAVERSAL_STEPS:
                raise RuntimeError(
                    "voxel traversal during collision check taking too long "
                    f"(count = {_MAX_TRAVERSAL_STEPS})"
                )
            if self._state_at_global(current) is VoxelState.OCCUPIED:
                return True
            count += 1

    def iter_voxels(self) -> Iterator[FloatVec]:
        """Yield the world centre of every voxel in every allocated chunk."""
        for chunk_key in list(self._map):
            for local in itertools.product(range(self.RES), repeat=3):
                yield self.global_to_world(self.local_to_global(chunk_key, local))

    def chunk_indices(self) -> list[IntVec]:
        """Indices of all allocated chunks."""
        return list(self._map)

    def map_limits(
        self, start: Sequence[float], goal: Sequence[float]
    ) -> tuple[FloatVec, FloatVec]:
        """Bounding box of all chunks (and the origin chunk), widened to hold start and goal."""
        keys = self._map.keys()
        min_chunk = [min(0, min(k[axis] for k in keys)) for axis in range(3)]
        max_chunk = [max(0, max(k[axis] for k in keys)) for axis in range(3)]
        edge = self.RES * self._scale
        lx, ly, lz = (
            min(edge * c, s, g) for c, s, g in zip(min_chunk, start, goal)
        )
        hx, hy, hz = (
            max(edge * (c + 1), s, g) for c, s, g in zip(max_chunk, start, goal)
        )
        return (lx, ly, lz), (hx, hy, hz)