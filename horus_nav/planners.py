"""Global goal selection and local path planning over a shared voxel grid."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence

from horus_nav.chunk import VoxelState
from horus_nav.search import clean_path, run_search
from horus_nav.voxel_grid import VoxelGrid

Point = tuple[float, float, float]

GOAL_TOLERANCE = 0.05
DEFAULT_GOAL: Point = (0.0, 20.0, 4.0)
RANDOM_GOAL_SPAN: Point = (20.0, 20.0, 3.0)
RANDOM_GOAL_FLOOR = 1.0

_log = logging.getLogger(__name__)


def _point(p: Sequence[float]) -> Point:
    x, y, z = p
    return (float(x), float(y), float(z))


class GlobalPlanner:
    """Chooses the goal the drone should head for next."""

    def __init__(
        self,
        voxel_grid: VoxelGrid,
        goals: Sequence[Sequence[float]] | None = None,
        rng: random.Random | None = None,
        tolerance: float = GOAL_TOLERANCE,
    ) -> None:
        self._grid = voxel_grid
        self._goals = [_point(g) for g in (goals if goals is not None else [DEFAULT_GOAL])]
        if not self._goals:
            raise ValueError("at least one goal is required")
        self._index = 0
        self._rng = rng if rng is not None else random.Random()
        self._tolerance = float(tolerance)
        self._position: Point = (0.0, 0.0, 0.0)

    @property
    def goals(self) -> list[Point]:
        """The goals currently planned, in visiting order."""
        return list(self._goals)

    @property
    def current_goal(self) -> Point:
        """The goal the drone is heading for."""
        return self._goals[self._index]

    def update_pose(self, position: Sequence[float]) -> None:
        """Record the latest drone position."""
        self._position = _point(position)

    def _reached(self, goal: Point) -> bool:
        return math.dist(self._position, goal) < self._tolerance

    def run_sequential(self) -> Point:
        """Advance through the goal list as each goal is reached, wrapping around."""
        if self._reached(self._goals[self._index]):
            self._index = (self._index + 1) % len(self._goals)
        return self._goals[self._index]

    def _random_goal(self) -> Point:
        x, y, z = (self._rng.random() * span for span in RANDOM_GOAL_SPAN)
        return (x, y, z + RANDOM_GOAL_FLOOR)

    def run_random(self) -> Point:
        """Replace the first goal with a random free one once it is reached or blocked."""
        goal = self._goals[0]
        if self._reached(goal) or self._grid.get_voxel_state(goal) == VoxelState.OCCUPIED:
            goal = self._random_goal()
            while self._grid.get_voxel_state(goal) == VoxelState.OCCUPIED:
                goal = self._random_goal()
            self._goals[0] = goal
        return self._goals[self._index]


class LocalPlanner:
    """Plans a cleaned path from the drone's position towards the current goal."""

    def __init__(self, voxel_grid: VoxelGrid) -> None:
        self._grid = voxel_grid
        self._start: Point = (0.0, 0.0, 0.0)
        self._goal: Point | None = None
        self._raw_path: list[Point] = []
        self._last_path: list[Point] = []

    @property
    def goal(self) -> Point | None:
        """The goal last received, if any."""
        return self._goal

    @property
    def raw_path(self) -> list[Point]:
        """The last path found by the search, before cleaning."""
        return list(self._raw_path)

    @property
    def last_path(self) -> list[Point]:
        """The last cleaned path produced."""
        return list(self._last_path)

    def update_pose(self, position: Sequence[float]) -> None:
        """Record the latest drone position."""
        self._start = _point(position)

    def update_goal(self, goal: Sequence[float]) -> None:
        """Record a new goal; only its first three values are used."""
        values = list(goal)
        if len(values) < 3:
            raise ValueError(f"goal needs three coordinates, got {len(values)}")
        self._goal = _point(values[:3])

    def plan(self) -> list[Point] | None:
        """Search and clean a path from the current position; None if none is found."""
        if self._goal is None:
            raise RuntimeError("no goal has been received")
        path = run_search(self._grid, self._start, self._goal)
        if path is None:
            _log.warning("search unable to find path to goal")
            return None
        self._raw_path = list(path)
        cleaned = clean_path(self._grid, path)
        # a second pass catches shortcuts the first one leaves behind
        cleaned = clean_path(self._grid, cleaned)
        self._last_path = cleaned
        return list(cleaned)