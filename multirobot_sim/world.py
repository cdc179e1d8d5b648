"""Occupancy-grid world and the base class for items living in it."""

from __future__ import annotations

import abc
from typing import List, Optional, Union

import numpy as np
from PIL import Image

from multirobot_sim.geometry import IntPoint, Point, Pose

OCCUPIED_THRESHOLD = 127


class World:
    """A grayscale occupancy grid; cells darker than 127 are obstacles."""

    def __init__(self) -> None:
        self.rows = 0
        self.cols = 0
        self.size = 0
        self.res = 0.05
        self.i_res = 20.0
        self.display_image = np.zeros((0, 0), dtype=np.uint8)
        self._grid = np.zeros((0, 0), dtype=np.uint8)
        self._items: List["WorldItem"] = []

    def at(self, p: IntPoint) -> int:
        """Return the grid value at ``p`` (row, column)."""
        return int(self._grid[p[0], p[1]])

    def inside(self, p: IntPoint) -> bool:
        return 0 <= p[0] < self.rows and 0 <= p[1] < self.cols

    def world2grid(self, p: Point) -> IntPoint:
        return (int(p[0] * self.i_res), int(p[1] * self.i_res))

    def grid2world(self, p: IntPoint) -> Point:
        return (p[0] * self.res, p[1] * self.res)

    def collides(self, p: IntPoint, radius: int) -> bool:
        """Tell whether a disc of ``radius`` cells at ``p`` touches an obstacle or the border."""
        if not self.inside(p):
            return True
        r2 = radius * radius
        for r in range(-radius, radius + 1):
            for c in range(-radius, radius + 1):
                if r * r + c * c > r2:
                    continue
                test = (p[0] + r, p[1] + c)
                if not self.inside(test):
                    return True
                if self.at(test) < OCCUPIED_THRESHOLD:
                    return True
        return False

    def load_from_array(self, grid) -> None:
        """Use a 2D array of 8-bit gray values as the map."""
        array = np.array(grid, dtype=np.uint8)
        if array.ndim != 2:
            raise ValueError("map grid must be two-dimensional")
        self._grid = array.copy()
        self.display_image = array.copy()
        self.rows, self.cols = array.shape
        self.size = self.rows * self.cols

    def load_from_image(self, filename) -> None:
        """Load the map from an image file, converted to grayscale."""
        try:
            with Image.open(filename) as image:
                gray = np.asarray(image.convert("L"), dtype=np.uint8)
        except OSError as exc:
            raise OSError(f"unable to load image: {filename}") from exc
        if gray.shape[0] == 0:
            raise OSError(f"unable to load image: {filename}")
        self.load_from_array(gray)

    def traverse_beam(self, origin: IntPoint, angle: float, max_range) -> Optional[IntPoint]:
        """Cast a ray from ``origin``; return the cell where it stops.

        The ray stops on an obstacle or after ``max_range`` steps. ``None``
        means it left the map first.
        """
        import math

        x, y = float(origin[0]), float(origin[1])
        dx, dy = math.cos(angle), math.sin(angle)
        endpoint = (int(origin[0]), int(origin[1]))
        for _ in range(int(max_range)):
            endpoint = (int(x), int(y))
            if not self.inside(endpoint):
                return None
            if self.at(endpoint) < OCCUPIED_THRESHOLD:
                return endpoint
            x += dx
            y += dy
        return endpoint

    def draw(self) -> np.ndarray:
        """Render all items and return the frame; the display is then reset to the map."""
        for item in self._items:
            item.draw()
        frame = self.display_image.copy()
        self.display_image = self._grid.copy()
        return frame

    def time_tick(self, dt: float) -> None:
        for item in self._items:
            item.time_tick(dt)

    def add(self, item: "WorldItem") -> None:
        self._items.append(item)


class WorldItem(abc.ABC):
    """Something placed in the world, either directly or relative to a parent item."""

    def __init__(self, parent: Union[World, "WorldItem"], pose: Optional[Pose] = None) -> None:
        if isinstance(parent, WorldItem):
            self.world: Optional[World] = parent.world
            self.parent: Optional[WorldItem] = parent
        else:
            self.world = parent
            self.parent = None
        self.pose_in_parent = pose if pose is not None else Pose.identity()
        if self.world is not None:
            self.world.add(self)

    def pose_in_world(self) -> Pose:
        if self.parent is None:
            return self.pose_in_parent
        return self.parent.pose_in_world() * self.pose_in_parent

    @abc.abstractmethod
    def draw(self) -> None:
        """Draw the item on the world's display image."""

    @abc.abstractmethod
    def time_tick(self, dt: float) -> None:
        """Advance the item by ``dt`` seconds."""