# horus_nav

Navigation building blocks for an autonomous drone, in plain Python with no
third-party dependencies:

- a chunked, sparse **voxel grid** with world/voxel/chunk coordinate
  conversions, box obstacles and voxel-traversal collision checks;
- **local path search** (A* and breadth-first) inside a cube around the
  start, plus line-of-sight path cleaning;
- a **pure-pursuit trajectory controller** that turns a path and the current
  pose into a velocity and yaw-rate command;
- a **voxel mapper** that places point clouds into the grid using the latest
  pose, choosing the buffered cloud nearest to it in time;
- **global and local planners** tying goals, search and cleaning together.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `horus_nav.chunk` | `VoxelState`, `Chunk`: a dense cube (16 voxels per edge by default) of voxel states |
| `horus_nav.voxel_grid` | `VoxelGrid`: sparse map of chunks keyed by chunk index |
| `horus_nav.geometry` | `sphere_line_intersection`, `sphere_segment_intersection`, `point_line_projection`, `point_segment_projection`, `bezier_point`, `quaternion_to_matrix` |
| `horus_nav.search` | `CameFrom`, `run_search`, `run_a_star`, `run_breadth_first`, `clean_path`, `euclidean_distance` |
| `horus_nav.controller` | `Pose`, `VelocityCommand`, `TrajectoryController` |
| `horus_nav.mapper` | `PointCloud`, `VoxelMapper` |
| `horus_nav.planners` | `GlobalPlanner`, `LocalPlanner` |

## Quick start

```python
from horus_nav.chunk import VoxelState
from horus_nav.search import clean_path, run_search
from horus_nav.voxel_grid import VoxelGrid

grid = VoxelGrid(1.0)                 # voxel edge length in world units
grid.add_obstacle((1, 1, 0), (3, 3, 3))

path = run_search(grid, (2.5, 0.5, 1.5), (3.5, 3.5, 1.5))
if path is None:
    print("start is inside an obstacle")
else:
    path = clean_path(grid, path)     # returns a new, shorter list
    print(path)

grid.get_voxel_state((2, 2, 2)) is VoxelState.OCCUPIED   # True
```

## Voxel grid

Coordinate frames:

- **world**: coordinates `(x, y, z)`;
- **global**: integer voxel indices, `floor(world / scale)`
  (`world_to_global`; `global_to_world` gives the voxel centre);
- **chunk / local**: a global index split into the index of its chunk and its
  position inside that chunk (`global_to_local`, `local_to_global`).

The grid starts with the chunk at `(0, 0, 0)`. Voxels in chunks that have
never been written read as `EMPTY`; `set_voxel_state` and `add_obstacle`
create chunks on demand. `num_chunks`, `chunk_indices()`, `iter_voxels()` and
`map_limits(start, goal)` describe what has been allocated.

`empty_neighbors(indices)` lists the empty face neighbours in the order
+x, -x, +y, -y, +z, -z. `check_collision(p1, p2)` walks the voxels along the
segment and returns `True` on the first occupied one (the voxel of `p1` is not
tested); it raises `RuntimeError` if the walk takes more than 1000 steps.

## Search

`run_search` returns `None` when the start voxel is occupied and otherwise
runs `run_a_star` inside a 32-voxel cube centred on the start voxel. When the
goal lies outside that cube, or cannot be reached, the path ends at the last
voxel the search reached, so it can be replanned as the drone moves. The first
waypoint is always the exact start point; the last is the exact goal when the
goal voxel was reached.

`run_breadth_first` searches the same kind of region but returns `None` when
the goal cannot be reached inside it. Both take `local_region_size` (default
32). `clean_path` drops waypoints that a clear line of sight lets the path
skip, and leaves its argument untouched.

## Trajectory control

```python
from horus_nav.controller import Pose, TrajectoryController

controller = TrajectoryController()          # lookahead_distance=1.0
controller.update_path(path)
controller.update_pose(Pose(position=(2.5, 0.5, 1.5), orientation=(0.0, 0.0, 0.0, 1.0)))
command = controller.compute_command()       # VelocityCommand, or None without a path
print(command.linear, command.yaw_rate, command.desired_point)
```

The controller chases the point where the lookahead sphere meets the path
(on the last segment it meets; of two hits, the one nearer that segment's
end). With no hit it takes the path's end if that is within the lookahead,
or else heads towards the nearest point of the path. A PD law in the world
frame is rotated into the body frame (with the y axis negated), and yaw is
commanded towards the chased point with a proportional gain. Quaternions are
given as `(x, y, z, w)`.

## Mapping

```python
from horus_nav.mapper import PointCloud, VoxelMapper

mapper = VoxelMapper(grid)                    # buffer_size=20, floor_height=0.25
mapper.on_points(PointCloud(stamp=10.0, points=[(1.0, 0.0, 1.0)]))
mapper.on_pose(10.02, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0, 1.0))
marked = mapper.process_points()              # number of points marked occupied
print(mapper.occupied_voxels())
```

Clouds are rotated and offset by the latest pose; points at or below
`floor_height` are skipped. `inflate_from_index(indices, max_iterations)`
spreads occupancy to empty neighbours.

## Planners

`GlobalPlanner(grid, goals=None, rng=None, tolerance=0.05)` keeps a goal list
(by default `(0, 20, 4)`). `run_sequential()` moves to the next goal once the
position given to `update_pose` is within the tolerance, wrapping around;
`run_random()` replaces the first goal with a random unoccupied one once it
is reached or blocked. Both return the current goal.

`LocalPlanner(grid)` takes `update_pose` and `update_goal`, and `plan()` runs
`run_search` followed by two passes of `clean_path`. It returns `None` when no
path is found and raises `RuntimeError` if no goal has been given.
`raw_path` and `last_path` keep the latest results.

## What this package does not do

There is no command-line program, no timers and no message transport: nothing
here subscribes to pose or point-cloud streams, publishes commands, or draws
visualisation markers. The caller feeds poses, clouds, paths and goals into the
classes above and reads their results. Maps live in memory only and are not
saved.