"""Planar rigid-body poses and point aliases."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

IntPoint = Tuple[int, int]
Point = Tuple[float, float]


def _normalize_angle(theta: float) -> float:
    return math.atan2(math.sin(theta), math.cos(theta))


@dataclass(frozen=True)
class Pose:
    """A 2D isometry: a translation followed by a rotation of ``theta`` radians.

    The angle is kept in ``[-pi, pi]``.
    """

    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "theta", _normalize_angle(self.theta))

    @classmethod
    def identity(cls) -> "Pose":
        """Return the pose that leaves every point where it is."""
        return cls(0.0, 0.0, 0.0)

    @property
    def translation(self) -> Point:
        return (self.x, self.y)

    def apply(self, point) -> Point:
        """Map a point from this pose's frame into the enclosing frame."""
        px, py = point
        c, s = math.cos(self.theta), math.sin(self.theta)
        return (self.x + c * px - s * py, self.y + s * px + c * py)

    def __mul__(self, other: Union["Pose", Point]):
        if isinstance(other, Pose):
            x, y = self.apply(other.translation)
            return Pose(x, y, self.theta + other.theta)
        if isinstance(other, (tuple, list)) and len(other) == 2:
            return self.apply(other)
        return NotImplemented