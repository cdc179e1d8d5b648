"""A circular robot driven by linear and angular velocity."""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from multirobot_sim.geometry import Pose
from multirobot_sim.world import World, WorldItem


class Robot(WorldItem):
    """A disc-shaped robot that moves unless the move would collide."""

    def __init__(
        self,
        radius: float,
        parent: Union[World, WorldItem],
        pose: Optional[Pose] = None,
    ) -> None:
        super().__init__(parent, pose)
        self.radius = radius
        self.tv = 0.0
        self.rv = 0.0

    def draw(self) -> None:
        world = self.world
        int_radius = int(self.radius * world.i_res)
        px, py = world.world2grid(self.pose_in_world().translation)
        image = world.display_image
        rr, cc = np.ogrid[: image.shape[0], : image.shape[1]]
        mask = (rr - px) ** 2 + (cc - py) ** 2 <= int_radius * int_radius
        image[mask] = 0

    def time_tick(self, dt: float) -> None:
        motion = Pose(self.tv * dt, 0.0, self.rv * dt)
        next_pose = self.pose_in_parent * motion
        ip = self.world.world2grid(next_pose.translation)
        int_radius = int(self.radius * self.world.i_res)
        if not self.world.collides(ip, int_radius):
            self.pose_in_parent = next_pose