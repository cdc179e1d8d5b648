"""Message types for odometry, laser scans and transforms, and an in-process bus."""

from __future__ import annotations

import math
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

Vector3 = Tuple[float, float, float]

_ZERO3: Vector3 = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Header:
    """Time stamp and coordinate frame of a message."""

    stamp: float = 0.0
    frame_id: str = ""


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0


def quaternion_from_yaw(yaw: float) -> Quaternion:
    """Return the quaternion of a rotation by ``yaw`` radians about the z axis."""
    half = yaw / 2.0
    return Quaternion(0.0, 0.0, math.sin(half), math.cos(half))


@dataclass(frozen=True)
class Twist:
    """Linear and angular velocity."""

    linear: Vector3 = _ZERO3
    angular: Vector3 = _ZERO3


@dataclass(frozen=True)
class Odometry:
    """Pose and velocity estimate of a robot."""

    header: Header
    child_frame_id: str
    position: Vector3
    orientation: Quaternion
    twist: Twist
    pose_covariance: Tuple[float, ...]
    twist_covariance: Tuple[float, ...]


@dataclass(frozen=True)
class LaserScan:
    """One sweep of a planar range finder."""

    header: Header
    angle_min: float
    angle_max: float
    angle_increment: float
    time_increment: float
    scan_time: float
    range_min: float
    range_max: float
    ranges: List[float] = field(default_factory=list)
    intensities: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class TransformStamped:
    """A transform from ``header.frame_id`` to ``child_frame_id``."""

    header: Header
    child_frame_id: str
    translation: Vector3
    rotation: Quaternion


class MessageBus:
    """Delivers published messages to topic subscribers and keeps the latest of each."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock
        self._subscribers: Dict[str, List[Callable[[Any], None]]] = defaultdict(list)
        self.latest: Dict[str, Any] = {}
        self.transforms: Dict[str, TransformStamped] = {}

    def publish(self, topic: str, message: Any) -> None:
        self.latest[topic] = message
        for callback in list(self._subscribers.get(topic, ())):
            callback(message)

    def subscribe(self, topic: str, callback: Callable[[Any], None]) -> None:
        self._subscribers[topic].append(callback)

    def send_transform(self, transform: TransformStamped) -> None:
        """Record a transform, replacing the previous one for the same child frame."""
        self.transforms[transform.child_frame_id] = transform