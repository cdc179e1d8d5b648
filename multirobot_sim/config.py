"""Simulation configuration: JSON description of the map, robots and lidars."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, TypeVar

from multirobot_sim.geometry import Pose

logger = logging.getLogger(__name__)

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

T = TypeVar("T")


class ConfigError(ValueError):
    """Raised when a configuration file or item cannot be used."""


@dataclass
class RobotConfig:
    """A robot entry of the configuration."""

    id: int
    frame_id: str
    namespace: str
    radius: float
    max_rv: float
    max_tv: float
    pose: Pose = field(default_factory=Pose.identity)
    parent: int = -1
    type: str = "robot"


@dataclass
class LidarConfig:
    """A lidar entry of the configuration."""

    id: int
    frame_id: str
    namespace: str
    fov: float
    max_range: float
    num_beams: int
    pose: Pose = field(default_factory=Pose.identity)
    parent: int = -1
    type: str = "lidar"


@dataclass
class SimulationConfig:
    """The whole simulation: map image file plus the robots and lidars in it."""

    map_file: str
    robots: List[RobotConfig] = field(default_factory=list)
    lidars: List[LidarConfig] = field(default_factory=list)


def _is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return _INT_MIN <= value <= _INT_MAX
    if isinstance(value, float):
        return value.is_integer() and _INT_MIN <= value <= _INT_MAX
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _as_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    raise ConfigError(f"value {value!r} is not a number")


def _field(
    item: Mapping[str, Any],
    kind: str,
    name: str,
    check: Callable[[Any], bool],
    convert: Callable[[Any], T],
) -> T:
    if name not in item or not check(item[name]):
        raise ConfigError(f"{kind} without valid '{name}'")
    return convert(item[name])


def parse_pose(value: Any) -> Pose:
    """Turn ``[x, y, theta]`` into a pose; anything else gives the identity."""
    if not isinstance(value, list) or len(value) != 3:
        logger.warning("invalid pose array, using identity")
        return Pose.identity()
    x, y, theta = (_as_float(v) for v in value)
    return Pose(x, y, theta)


def _common(item: Mapping[str, Any], kind: str) -> dict:
    return {
        "id": _field(item, kind, "id", _is_int, int),
        "frame_id": _field(item, kind, "frame_id", _is_string, str),
        "namespace": _field(item, kind, "namespace", _is_string, str),
    }


def _placement(item: Mapping[str, Any], kind: str) -> dict:
    return {
        "pose": _field(item, kind, "pose", lambda v: isinstance(v, list), parse_pose),
        "parent": _field(item, kind, "parent", _is_int, int),
    }


def parse_robot(item: Mapping[str, Any]) -> RobotConfig:
    """Build a robot entry; raise ConfigError if a required field is missing or invalid."""
    kind = "robot"
    common = _common(item, kind)
    radius = _field(item, kind, "radius", _is_number, float)
    max_rv = _field(item, kind, "max_rv", _is_number, float)
    max_tv = _field(item, kind, "max_tv", _is_number, float)
    return RobotConfig(
        radius=radius, max_rv=max_rv, max_tv=max_tv, **common, **_placement(item, kind)
    )


def parse_lidar(item: Mapping[str, Any]) -> LidarConfig:
    """Build a lidar entry; raise ConfigError if a required field is missing or invalid."""
    kind = "lidar"
    common = _common(item, kind)
    fov = _field(item, kind, "fov", _is_number, float)
    max_range = _field(item, kind, "max_range", _is_number, float)
    num_beams = _field(item, kind, "num_beams", _is_int, int)
    return LidarConfig(
        fov=fov, max_range=max_range, num_beams=num_beams, **common, **_placement(item, kind)
    )


def parse_config(data: Any) -> SimulationConfig:
    """Build a configuration from decoded JSON.

    The ``map`` string and ``items`` array are required. Items without a
    type, of an unknown type, or with invalid fields are skipped.
    """
    if not isinstance(data, dict):
        raise ConfigError("configuration root must be an object")
    if not _is_string(data.get("map")):
        raise ConfigError("missing or invalid 'map' field")
    items = data.get("items")
    if not isinstance(items, list):
        raise ConfigError("missing or invalid 'items' array")

    config = SimulationConfig(map_file=data["map"])
    parsers = {
        "robot": (parse_robot, config.robots),
        "lidar": (parse_lidar, config.lidars),
    }
    for item in items:
        if not isinstance(item, dict) or not _is_string(item.get("type")):
            logger.warning("item without 'type' field, skipping it")
            continue
        kind = item["type"]
        if kind not in parsers:
            logger.warning("unknown item type: %s", kind)
            continue
        parse, target = parsers[kind]
        try:
            entry = parse(item)
        except ConfigError as exc:
            logger.warning("failed to parse %s: %s", kind, exc)
            continue
        target.append(entry)
        logger.info("loaded %s: id=%d, namespace=%s", kind, entry.id, entry.namespace)

    logger.info(
        "configuration loaded: %d robots, %d lidars", len(config.robots), len(config.lidars)
    )
    return config


def load_config(filename) -> SimulationConfig:
    """Read and parse a JSON configuration file."""
    try:
        with open(filename, encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise ConfigError(f"cannot open file: {filename}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"JSON parse error: {exc}") from exc
    return parse_config(data)


def format_config(config: SimulationConfig) -> str:
    """Return a human-readable summary of the configuration."""
    lines = [
        "=== Simulation config ===",
        f"Map file: {config.map_file}",
        f"Robots ({len(config.robots)}):",
    ]
    lines.extend(
        f"  Robot {r.id}: ns={r.namespace}, frame={r.frame_id}, "
        f"radius={r.radius:.2f}, parent={r.parent}"
        for r in config.robots
    )
    lines.append(f"Lidars ({len(config.lidars)}):")
    lines.extend(
        f"  Lidar {l.id}: ns={l.namespace}, frame={l.frame_id}, "
        f"beams={l.num_beams}, parent={l.parent}"
        for l in config.lidars
    )
    lines.append("=== End config ===")
    return "\n".join(lines)