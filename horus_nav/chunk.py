"""Fixed-size cubic blocks of voxel states."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum

DEFAULT_RESOLUTION = 16


class VoxelState(IntEnum):
    """Occupancy state of a single voxel."""

    UNKNOWN = 0
    EMPTY = 1
    OCCUPIED = 2


class Chunk:
    """A dense cube of ``res`` x ``res`` x ``res`` voxels, all empty at first."""

    __slots__ = ("_res", "_voxels")

    def __init__(self, res: int = DEFAULT_RESOLUTION) -> None:
        if res <= 0:
            raise ValueError(f"chunk resolution must be positive, got {res}")
        self._res = res
        self._voxels = [VoxelState.EMPTY] * (res**3)

    @property
    def res(self) -> int:
        """Number of voxels along each edge."""
        return self._res

    def _flatten(self, ind: Sequence[int]) -> int:
        x, y, z = ind
        res = self._res
        if not all(0 <= c < res for c in (x, y, z)):
            raise IndexError(f"local index {tuple(ind)} outside chunk of size {res}")
        return x + res * y + res * res * z

    def get_voxel_state(self, ind: Sequence[int]) -> VoxelState:
        """Return the state of the voxel at local indices ``ind``."""
        return self._voxels[self._flatten(ind)]

    def set_voxel_state(self, ind: Sequence[int], state: VoxelState) -> None:
        """Set the state of the voxel at local indices ``ind``."""
        self._voxels[self._flatten(ind)] = VoxelState(state)