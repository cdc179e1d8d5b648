"""A lidar that publishes its scans and its transform."""

from __future__ import annotations

import math
from typing import Optional, Union

from multirobot_sim.geometry import Pose
from multirobot_sim.lidar import Lidar
from multirobot_sim.messages import (
    Header,
    LaserScan,
    MessageBus,
    TransformStamped,
    quaternion_from_yaw,
)
from multirobot_sim.world import World, WorldItem

MAP_FRAME = "map"
RANGE_MIN = 0.1
SCAN_TIME = 0.1
INTENSITY = 100.0


class LidarNode(Lidar):
    """A lidar publishing ``/<namespace>/base_scan``."""

    def __init__(
        self,
        fov: float,
        max_range: float,
        num_beams: int,
        parent: Union[World, WorldItem],
        namespace: str,
        frame_id: str,
        pose: Optional[Pose] = None,
        bus: Optional[MessageBus] = None,
    ) -> None:
        super().__init__(fov, max_range, num_beams, parent, pose)
        self.namespace = namespace
        self.frame_id = frame_id
        self.bus = bus if bus is not None else MessageBus()
        self.scan_topic = f"/{namespace}/base_scan"
        self.last_scan_time = self.bus.clock()

    def time_tick(self, dt: float) -> None:
        super().time_tick(dt)
        self.publish_laser_scan()
        self.publish_transform()

    def publish_laser_scan(self) -> LaserScan:
        """Publish the current ranges; those outside the valid interval become infinity."""
        now = self.bus.clock()
        ranges = [
            r if RANGE_MIN <= r <= self.max_range else math.inf for r in self.ranges
        ]
        scan = LaserScan(
            header=Header(now, self.frame_id),
            angle_min=-self.fov / 2.0,
            angle_max=self.fov / 2.0,
            angle_increment=self.fov / self.num_beams,
            time_increment=0.0,
            scan_time=SCAN_TIME,
            range_min=RANGE_MIN,
            range_max=self.max_range,
            ranges=ranges,
            intensities=[INTENSITY] * self.num_beams,
        )
        self.bus.publish(self.scan_topic, scan)
        self.last_scan_time = now
        return scan

    def publish_transform(self) -> TransformStamped:
        """Publish the pose relative to the parent's base link, or to the map if unattached."""
        if self.parent is not None:
            frame = f"{self.namespace}_base_link"
            pose = self.pose_in_parent
        else:
            frame = MAP_FRAME
            pose = self.pose_in_world()
        transform = TransformStamped(
            header=Header(self.bus.clock(), frame),
            child_frame_id=self.frame_id,
            translation=(pose.x, pose.y, 0.0),
            rotation=quaternion_from_yaw(pose.theta),
        )
        self.bus.send_transform(transform)
        return transform