import math

import pytest

from horus_nav.controller import Pose, TrajectoryController


def _controller(path, pose=None):
    ctrl = TrajectoryController()
    if pose is not None:
        ctrl.update_pose(pose)
    ctrl.update_path(path)
    return ctrl


def test_no_path_gives_no_command():
    assert TrajectoryController().compute_command() is None


def test_empty_path_rejected():
    with pytest.raises(ValueError):
        TrajectoryController().update_path([])


def test_non_positive_lookahead_rejected():
    with pytest.raises(ValueError):
        TrajectoryController(lookahead_distance=0)


def test_desired_point_on_path_at_lookahead():
    cmd = _controller([(0, 0, 0), (5, 0, 0)]).compute_command()
    x, y, z = cmd.desired_point
    assert math.dist(cmd.desired_point, (0, 0, 0)) == pytest.approx(1.0)
    assert x > 0
    assert y == pytest.approx(0.0)
    assert z == pytest.approx(0.0)


def test_end_within_lookahead_is_target():
    cmd = _controller([(0, 0, 0), (0.5, 0, 0)]).compute_command()
    assert cmd.desired_point == pytest.approx((0.5, 0, 0))


def test_far_from_path_heads_towards_it():
    pose = Pose(position=(0.0, 5.0, 0.0))
    cmd = _controller([(-1, 0, 0), (1, 0, 0)], pose).compute_command()
    x, y, _ = cmd.desired_point
    assert math.dist(cmd.desired_point, pose.position) == pytest.approx(1.0)
    assert x == pytest.approx(0.0)
    assert y < 5.0


def test_steady_state_has_no_derivative_term():
    ctrl = _controller([(0, 0, 0), (3, 2, 1)])
    ctrl.compute_command()
    cmd = ctrl.compute_command()
    dx, dy, dz = cmd.desired_point
    assert cmd.linear == pytest.approx((dx, -dy, dz))


def test_rotation_preserves_command_magnitude():
    path = [(0, 0, 0), (4, 3, 1)]
    plain = _controller(path).compute_command()
    s = math.sin(0.4)
    turned = _controller(
        path, Pose(orientation=(0.0, 0.0, s, math.cos(0.4)))
    ).compute_command()
    assert math.hypot(*turned.linear) == pytest.approx(math.hypot(*plain.linear))
    assert turned.desired_point == pytest.approx(plain.desired_point)


def test_unnormalized_quaternion_is_normalized():
    path = [(0, 0, 0), (2, 2, 0)]
    q = (0.0, 0.0, math.sin(0.3), math.cos(0.3))
    unit = _controller(path, Pose(orientation=q)).compute_command()
    doubled = _controller(
        path, Pose(orientation=tuple(2 * c for c in q))
    ).compute_command()
    assert doubled.linear == pytest.approx(unit.linear)
    assert doubled.yaw_rate == pytest.approx(unit.yaw_rate)


def test_facing_the_target_needs_no_yaw():
    q = (0.0, 0.0, math.sin(math.pi / 4), math.cos(math.pi / 4))
    cmd = _controller([(0, 0, 0), (0, 5, 0)], Pose(orientation=q)).compute_command()
    assert cmd.yaw_rate == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("angle", [0.0, 1.0, 2.5, -2.0, 3.1])
def test_yaw_rate_is_bounded(angle):
    q = (0.0, 0.0, math.sin(angle / 2), math.cos(angle / 2))
    cmd = _controller([(0, 0, 0), (-3, -4, 0)], Pose(orientation=q)).compute_command()
    assert abs(cmd.yaw_rate) <= 0.75 * math.pi + 1e-9


def test_zero_quaternion_rejected():
    ctrl = _controller([(0, 0, 0), (1, 1, 1)], Pose(orientation=(0, 0, 0, 0)))
    with pytest.raises(ValueError):
        ctrl.compute_command()