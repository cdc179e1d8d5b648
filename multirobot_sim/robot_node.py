"""A robot that takes velocity commands and publishes its odometry and transform."""

from __future__ import annotations

from typing import Optional, Tuple, Union

from multirobot_sim.geometry import Pose
from multirobot_sim.messages import (
    Header,
    MessageBus,
    Odometry,
    TransformStamped,
    Twist,
    quaternion_from_yaw,
)
from multirobot_sim.robot import Robot
from multirobot_sim.world import World, WorldItem

MAP_FRAME = "map"
COVARIANCE_VALUE = 0.01


def _covariance(*indices: int) -> Tuple[float, ...]:
    return tuple(COVARIANCE_VALUE if i in indices else 0.0 for i in range(36))


class RobotNode(Robot):
    """A robot listening on ``/<namespace>/cmd_vel`` and publishing ``/<namespace>/odom``."""

    def __init__(
        self,
        radius: float,
        parent: Union[World, WorldItem],
        namespace: str,
        frame_id: str,
        max_tv: float = 1.0,
        max_rv: float = 1.0,
        pose: Optional[Pose] = None,
        bus: Optional[MessageBus] = None,
    ) -> None:
        super().__init__(radius, parent, pose)
        self.namespace = namespace
        self.frame_id = frame_id
        self.max_tv = max_tv
        self.max_rv = max_rv
        self.bus = bus if bus is not None else MessageBus()
        self.odom_frame_id = f"{namespace}/odom"
        self.odom_topic = f"/{namespace}/odom"
        self.cmd_vel_topic = f"/{namespace}/cmd_vel"
        self.bus.subscribe(self.cmd_vel_topic, self.on_cmd_vel)
        self.current_twist = Twist()
        self.last_time = self.bus.clock()
        self.last_pose = self.pose_in_parent

    def on_cmd_vel(self, twist: Twist) -> None:
        """Take a velocity command, clamped to the robot's limits."""
        self.tv = max(-self.max_tv, min(self.max_tv, float(twist.linear[0])))
        self.rv = max(-self.max_rv, min(self.max_rv, float(twist.angular[2])))
        self.current_twist = twist

    def time_tick(self, dt: float) -> None:
        super().time_tick(dt)
        self.publish_odometry()
        self.publish_transform()

    def publish_odometry(self) -> Odometry:
        now = self.bus.clock()
        world_pose = self.pose_in_world()
        message = Odometry(
            header=Header(now, MAP_FRAME),
            child_frame_id=self.frame_id,
            position=(world_pose.x, world_pose.y, 0.0),
            orientation=quaternion_from_yaw(world_pose.theta),
            twist=Twist(linear=(self.tv, 0.0, 0.0), angular=(0.0, 0.0, self.rv)),
            pose_covariance=_covariance(0, 7, 35),
            twist_covariance=_covariance(0, 35),
        )
        self.bus.publish(self.odom_topic, message)
        self.last_time = now
        self.last_pose = world_pose
        return message

    def publish_transform(self) -> TransformStamped:
        world_pose = self.pose_in_world()
        transform = TransformStamped(
            header=Header(self.bus.clock(), MAP_FRAME),
            child_frame_id=self.frame_id,
            translation=(world_pose.x, world_pose.y, 0.0),
            rotation=quaternion_from_yaw(world_pose.theta),
        )
        self.bus.send_transform(transform)
        return transform