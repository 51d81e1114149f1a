import math

import pytest

from horus_nav.chunk import VoxelState
from horus_nav.search import (
    CameFrom,
    clean_path,
    euclidean_distance,
    run_a_star,
    run_breadth_first,
    run_search,
)
from horus_nav.voxel_grid import VoxelGrid


def test_came_from_default_and_set():
    came_from = CameFrom((16, 32, 48))
    assert came_from.at((15, 10, 8)) is None
    came_from.set((15, 10, 8), (14, 12, 11))
    assert came_from.at((15, 10, 8)) == (14, 12, 11)


def test_came_from_out_of_range():
    came_from = CameFrom((4, 4, 4))
    with pytest.raises(IndexError):
        came_from.at((4, 0, 0))
    with pytest.raises(IndexError):
        came_from.set((0, 0, 0), (-1, 0, 0))


def test_came_from_rejects_bad_dims():
    with pytest.raises(ValueError):
        CameFrom((0, 4, 4))


def test_euclidean_distance():
    assert euclidean_distance((0, 0, 0), (3, 4, 0)) == 5.0
    assert euclidean_distance((3, 4, 0), (0, 0, 0)) == 5.0
    assert euclidean_distance((1, 2, 3), (1, 2, 3)) == 0.0


def test_breadth_first_search():
    grid = VoxelGrid()
    path = run_breadth_first(grid, (0, 0, 0), (4, 4, 4), 16)
    assert path is not None
    assert path[0] == (0.0, 0.0, 0.0)
    assert path[-1] == (4.0, 4.0, 4.0)
    assert len(path) == 13


def test_breadth_first_goal_in_start_voxel():
    grid = VoxelGrid()
    path = run_breadth_first(grid, (0.1, 0.1, 0.1), (0.5, 0.5, 0.5), 16)
    assert path == [(0.1, 0.1, 0.1)]


def test_breadth_first_goal_occupied_is_unreachable():
    grid = VoxelGrid()
    grid.add_obstacle((4, 0, 0), (5, 1, 1))
    assert run_breadth_first(grid, (0.5, 0.5, 0.5), (4.5, 0.5, 0.5), 16) is None


def test_breadth_first_goal_outside_region():
    grid = VoxelGrid()
    assert run_breadth_first(grid, (0, 0, 0), (20, 20, 20), 16) is None


def test_a_star_inside_local():
    grid = VoxelGrid()
    path = run_a_star(grid, (0, 0, 0), (4, 4, 4), 16)
    assert path[0] == (0.0, 0.0, 0.0)
    assert path[-1] == (4.0, 4.0, 4.0)
    for a, b in zip(path[1:-2], path[2:-1]):
        assert math.dist(a, b) == 1.0


def test_a_star_outside_local():
    grid = VoxelGrid()
    path = run_a_star(grid, (0, 0, 0), (20, 20, 20), 16)
    assert path[0] == (0.0, 0.0, 0.0)
    assert path[-1] != (20.0, 20.0, 20.0)
    for a, b in zip(path[1:], path[2:]):
        assert math.dist(a, b) == 1.0
    assert all(-8 <= c < 8 for c in grid.world_to_global(path[-1]))


def test_a_star_within_single_voxel():
    grid = VoxelGrid()
    path = run_a_star(grid, (0.1, 0.1, 0.1), (0.5, 0.5, 0.5), 16)
    path = clean_path(grid, path)
    path = clean_path(grid, path)
    path = clean_path(grid, path)
    assert path == [(0.1, 0.1, 0.1), (0.5, 0.5, 0.5)]


def test_a_star_enclosed_start():
    grid = VoxelGrid()
    for neighbor in [
        (1.5, 0.5, 0.5),
        (-0.5, 0.5, 0.5),
        (0.5, 1.5, 0.5),
        (0.5, -0.5, 0.5),
        (0.5, 0.5, 1.5),
        (0.5, 0.5, -0.5),
    ]:
        grid.set_voxel_state(neighbor, VoxelState.OCCUPIED)
    path = run_a_star(grid, (0.2, 0.2, 0.2), (5, 5, 5), 16)
    assert path == [(0.2, 0.2, 0.2), (0.5, 0.5, 0.5)]


def test_region_size_must_be_positive():
    with pytest.raises(ValueError):
        run_a_star(VoxelGrid(), (0, 0, 0), (1, 1, 1), 0)


def test_run_search_simple():
    grid = VoxelGrid()
    path = run_search(grid, (0, 0, 0), (4, 0.3, 0.3))
    assert path == [
        (0.0, 0.0, 0.0),
        (1.5, 0.5, 0.5),
        (2.5, 0.5, 0.5),
        (3.5, 0.5, 0.5),
        (4.0, 0.3, 0.3),
    ]


def test_run_search_around_obstacle():
    grid = VoxelGrid()
    grid.add_obstacle((1, 1, 0), (3, 3, 3))
    path = run_search(grid, (2.5, 0.5, 1.5), (3.5, 3.5, 1.5))
    assert path == [
        (2.5, 0.5, 1.5),
        (3.5, 0.5, 1.5),
        (3.5, 1.5, 1.5),
        (3.5, 2.5, 1.5),
        (3.5, 3.5, 1.5),
    ]
    cleaned = clean_path(grid, path)
    assert cleaned == [(2.5, 0.5, 1.5), (3.5, 0.5, 1.5), (3.5, 3.5, 1.5)]


def test_clean_path_outside_chunk():
    grid = VoxelGrid()
    path = run_search(grid, (18, 0, 0), (20.625, 0.625, 4.875))
    assert path is not None
    cleaned = clean_path(grid, path)
    assert len(cleaned) == 2
    assert grid.num_chunks == 1


def test_clean_path_straight_line_keeps_ends_and_input():
    grid = VoxelGrid()
    path = [(0.5, 0.5, 0.5), (1.5, 0.5, 0.5), (2.5, 0.5, 0.5), (3.5, 0.5, 0.5)]
    original = list(path)
    cleaned = clean_path(grid, path)
    assert cleaned == [(0.5, 0.5, 0.5), (3.5, 0.5, 0.5)]
    assert path == original


def test_clean_path_short_paths_unchanged():
    grid = VoxelGrid()
    assert clean_path(grid, []) == []
    assert clean_path(grid, [(1, 2, 3)]) == [(1.0, 2.0, 3.0)]


def test_impossible_path_starting_in_obstacle():
    grid = VoxelGrid()
    grid.add_obstacle((1, 1, 1), (3, 3, 3))
    assert run_search(grid, (2, 2, 2), (3, 3, 3)) is None


def test_start_and_goal_not_in_chunk():
    grid = VoxelGrid()
    grid.add_obstacle((1, 1, 1), (3, 3, 3))
    path = run_search(grid, (-1, -1, -1), (4, 4, 4))
    assert path is not None
    assert path[0] == (-1.0, -1.0, -1.0)
    assert path[-1] == (4.0, 4.0, 4.0)