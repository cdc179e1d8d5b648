"""A planar laser range finder that casts beams through the world grid."""

from __future__ import annotations

import math
from typing import Iterator, List, Optional, Union

from multirobot_sim.geometry import IntPoint, Pose
from multirobot_sim.world import World, WorldItem

BEAM_SHADE = 127


def _line_cells(start: IntPoint, end: IntPoint) -> Iterator[IntPoint]:
    """Yield the grid cells of a straight segment, endpoints included."""
    r0, c0 = start
    r1, c1 = end
    dr, dc = abs(r1 - r0), -abs(c1 - c0)
    sr = 1 if r0 < r1 else -1
    sc = 1 if c0 < c1 else -1
    err = dr + dc
    while True:
        yield (r0, c0)
        if (r0, c0) == (r1, c1):
            return
        e2 = 2 * err
        if e2 >= dc:
            err += dc
            r0 += sr
        if e2 <= dr:
            err += dr
            c0 += sc


class Lidar(WorldItem):
    """Measures distances along ``num_beams`` beams spread over ``fov`` radians."""

    def __init__(
        self,
        fov: float,
        max_range: float,
        num_beams: int,
        parent: Union[World, WorldItem],
        pose: Optional[Pose] = None,
    ) -> None:
        super().__init__(parent, pose)
        self.fov = fov
        self.max_range = max_range
        self.num_beams = num_beams
        self.ranges: List[float] = [-1.0] * num_beams

    def _beam_angles(self, start: float) -> Iterator[float]:
        step = self.fov / self.num_beams
        return (start + i * step for i in range(self.num_beams))

    def time_tick(self, dt: float) -> None:
        world = self.world
        piw = self.pose_in_world()
        origin = world.world2grid(piw.translation)
        if not world.inside(origin):
            return
        int_range = int(self.max_range * world.i_res)

        def measure(alpha: float) -> float:
            endpoint = world.traverse_beam(origin, alpha, int_range)
            if endpoint is None:
                return self.max_range
            return math.hypot(endpoint[0] - origin[0], endpoint[1] - origin[1]) * world.res

        self.ranges = [measure(a) for a in self._beam_angles(piw.theta - self.fov / 2)]

    def draw(self) -> None:
        world = self.world
        piw = self.pose_in_world()
        origin = world.world2grid(piw.translation)
        if not world.inside(origin):
            return
        image = world.display_image
        for r, alpha in zip(self.ranges, self._beam_angles(-self.fov / 2)):
            end = world.world2grid(piw.apply((r * math.cos(alpha), r * math.sin(alpha))))
            for cell in _line_cells(origin, end):
                if world.inside(cell):
                    image[cell] = BEAM_SHADE