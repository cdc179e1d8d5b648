import math

import numpy as np
import pytest

from multirobot_sim.geometry import Pose
from multirobot_sim.messages import MessageBus, Odometry, Twist, quaternion_from_yaw
from multirobot_sim.robot_node import RobotNode
from multirobot_sim.world import World


@pytest.fixture
def world():
    w = World()
    w.load_from_array(np.full((100, 100), 255, dtype=np.uint8))
    return w


@pytest.fixture
def bus():
    return MessageBus(clock=lambda: 3.0)


def make_node(world, bus, pose=None):
    return RobotNode(0.1, world, "r0", "r0_base_link", max_tv=1.0, max_rv=0.5,
                     pose=pose or Pose(2.0, 2.0, 0.0), bus=bus)


def test_cmd_vel_is_clamped(world, bus):
    node = make_node(world, bus)
    node.on_cmd_vel(Twist(linear=(5.0, 0.0, 0.0), angular=(0.0, 0.0, -9.0)))
    assert node.tv == 1.0
    assert node.rv == -0.5


def test_cmd_vel_within_limits_is_kept(world, bus):
    node = make_node(world, bus)
    twist = Twist(linear=(0.3, 0.0, 0.0), angular=(0.0, 0.0, 0.2))
    node.on_cmd_vel(twist)
    assert (node.tv, node.rv) == (0.3, 0.2)
    assert node.current_twist is twist


def test_cmd_vel_topic_drives_node(world, bus):
    node = make_node(world, bus)
    bus.publish("/r0/cmd_vel", Twist(linear=(-3.0, 0.0, 0.0)))
    assert node.tv == -1.0


def test_time_tick_moves_and_publishes_odometry(world, bus):
    node = make_node(world, bus)
    node.on_cmd_vel(Twist(linear=(1.0, 0.0, 0.0), angular=(0.0, 0.0, 0.0)))
    node.time_tick(0.5)
    odom = bus.latest["/r0/odom"]
    assert isinstance(odom, Odometry)
    pose = node.pose_in_world()
    assert pose.x == pytest.approx(2.5)
    assert odom.position == (pose.x, pose.y, 0.0)
    assert odom.header.frame_id == "map"
    assert odom.header.stamp == 3.0
    assert odom.child_frame_id == "r0_base_link"
    assert odom.twist.linear[0] == node.tv
    assert odom.twist.angular[2] == node.rv
    assert node.last_pose == pose


def test_odometry_covariance(world, bus):
    odom = make_node(world, bus).publish_odometry()
    assert len(odom.pose_covariance) == 36
    assert len(odom.twist_covariance) == 36
    assert [i for i, v in enumerate(odom.pose_covariance) if v] == [0, 7, 35]
    assert [i for i, v in enumerate(odom.twist_covariance) if v] == [0, 35]
    assert odom.pose_covariance[0] == 0.01


def test_transform_matches_world_pose(world, bus):
    node = make_node(world, bus, pose=Pose(1.0, 3.0, 0.7))
    node.time_tick(0.1)
    tf = bus.transforms["r0_base_link"]
    pose = node.pose_in_world()
    assert tf.header.frame_id == "map"
    assert tf.translation == (pose.x, pose.y, 0.0)
    assert tf.rotation == quaternion_from_yaw(pose.theta)
    assert math.isclose(2 * math.atan2(tf.rotation.z, tf.rotation.w), 0.7)


def test_world_tick_reaches_node(world, bus):
    make_node(world, bus)
    world.time_tick(0.1)
    assert "/r0/odom" in bus.latest
    assert "r0_base_link" in bus.transforms