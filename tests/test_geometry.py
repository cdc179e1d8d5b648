import math

import pytest

from multirobot_sim.geometry import Pose


def test_identity_leaves_points_unchanged():
    assert Pose.identity().apply((3.5, -2.0)) == pytest.approx((3.5, -2.0))


def test_identity_is_neutral_for_composition():
    p = Pose(1.0, 2.0, 0.7)
    left = Pose.identity() * p
    right = p * Pose.identity()
    for q in (left, right):
        assert q.x == pytest.approx(p.x)
        assert q.y == pytest.approx(p.y)
        assert q.theta == pytest.approx(p.theta)


def test_quarter_turn_applied_to_point():
    p = Pose(1.0, 2.0, math.pi / 2)
    assert p.apply((1.0, 0.0)) == pytest.approx((1.0, 3.0))


def test_angle_is_normalized():
    p = Pose(0.0, 0.0, 2 * math.pi + 0.25)
    assert p.theta == pytest.approx(0.25)
    assert -math.pi <= Pose(0.0, 0.0, 3 * math.pi - 0.1).theta <= math.pi


def test_multiplying_by_point_matches_apply():
    p = Pose(-0.5, 4.0, 1.2)
    assert p * (2.0, 3.0) == pytest.approx(p.apply((2.0, 3.0)))


def test_composition_is_associative():
    a = Pose(1.0, 0.0, 0.3)
    b = Pose(0.0, 2.0, -1.1)
    c = Pose(-1.5, 0.5, 2.0)
    lhs = (a * b) * c
    rhs = a * (b * c)
    assert lhs.x == pytest.approx(rhs.x)
    assert lhs.y == pytest.approx(rhs.y)
    assert lhs.theta == pytest.approx(rhs.theta)


def test_composition_applies_inner_pose_first():
    a = Pose(1.0, 2.0, 0.4)
    b = Pose(-3.0, 0.5, 1.0)
    point = (0.25, -0.75)
    assert (a * b).apply(point) == pytest.approx(a.apply(b.apply(point)))


def test_translation_property():
    assert Pose(4.0, -1.0, 0.2).translation == (4.0, -1.0)


def test_rotation_preserves_distance():
    p = Pose(0.0, 0.0, 0.9)
    x, y = p.apply((3.0, 4.0))
    assert math.hypot(x, y) == pytest.approx(math.hypot(3.0, 4.0))