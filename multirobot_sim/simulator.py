"""The simulation driver: builds the world from a configuration and steps it."""

from __future__ import annotations

import argparse
import logging
import os
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from multirobot_sim.config import (
    ConfigError,
    LidarConfig,
    RobotConfig,
    SimulationConfig,
    format_config,
    load_config,
)
from multirobot_sim.lidar_node import LidarNode
from multirobot_sim.messages import MessageBus
from multirobot_sim.robot_node import RobotNode
from multirobot_sim.world import World, WorldItem

logger = logging.getLogger(__name__)

MAX_DT = 0.1
ESCAPE_KEY = 27
QUIT_KEYS = (ESCAPE_KEY, ord("q"), "q")
NO_PARENT = -1

Display = Callable[[np.ndarray], Any]


class MultiRobotSimulator:
    """Holds the world, robots and lidars and advances them at a fixed rate.

    When visualization is on, every step renders a frame. If a ``display``
    callback is given it receives the frame and may return a key; ESC or
    ``q`` stops the simulation.
    """

    def __init__(
        self,
        sim_frequency: float = 50.0,
        show_visualization: bool = True,
        map_directory: str = "../map/",
        bus: Optional[MessageBus] = None,
        display: Optional[Display] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if sim_frequency <= 0:
            raise ValueError("simulation frequency must be positive")
        self.sim_frequency = sim_frequency
        self.show_visualization = show_visualization
        self.map_directory = map_directory
        self.bus = bus if bus is not None else MessageBus()
        self.display = display
        self._sleep = sleep
        self.world: Optional[World] = None
        self.robots: List[RobotNode] = []
        self.lidars: List[LidarNode] = []
        self.items_by_id: Dict[int, WorldItem] = {}
        self.config: Optional[SimulationConfig] = None
        self.last_frame: Optional[np.ndarray] = None
        self.running = True
        self._last_time: Optional[float] = None
        logger.info("simulator initialized at %.1f Hz", sim_frequency)

    @property
    def period(self) -> float:
        return 1.0 / self.sim_frequency

    def load_configuration(self, config_file: Union[str, os.PathLike]) -> None:
        """Read a JSON configuration and build the simulation from it."""
        config = load_config(config_file)
        logger.info("%s", format_config(config))
        self.initialize(config)

    def initialize(self, config: SimulationConfig) -> None:
        """Create the world, load its map and create every robot and lidar."""
        self.config = config
        self.world = World()
        self.robots = []
        self.lidars = []
        self.items_by_id = {}
        map_path = os.path.join(self.map_directory, config.map_file)
        self.world.load_from_image(map_path)
        logger.info("loaded map: %s (%dx%d)", map_path, self.world.rows, self.world.cols)

        for robot_config in config.robots:
            robot = self._create_robot(robot_config)
            if robot is not None:
                self.robots.append(robot)
                self.items_by_id[robot_config.id] = robot
                logger.info("created robot %d: %s", robot_config.id, robot_config.namespace)

        for lidar_config in config.lidars:
            lidar = self._create_lidar(lidar_config)
            if lidar is not None:
                self.lidars.append(lidar)
                self.items_by_id[lidar_config.id] = lidar
                logger.info("created lidar %d: %s", lidar_config.id, lidar_config.namespace)

        logger.info(
            "simulation initialized with %d robots and %d lidars",
            len(self.robots),
            len(self.lidars),
        )

    def _resolve_parent(self, kind: str, item_id: int, parent_id: int):
        if parent_id == NO_PARENT:
            return self.world
        parent = self.items_by_id.get(parent_id)
        if parent is None:
            logger.error("%s %d: parent %d not found", kind, item_id, parent_id)
        return parent

    def _create_robot(self, config: RobotConfig) -> Optional[RobotNode]:
        parent = self._resolve_parent("robot", config.id, config.parent)
        if parent is None:
            return None
        return RobotNode(
            config.radius,
            parent,
            config.namespace,
            config.frame_id,
            max_tv=config.max_tv,
            max_rv=config.max_rv,
            pose=config.pose,
            bus=self.bus,
        )

    def _create_lidar(self, config: LidarConfig) -> Optional[LidarNode]:
        parent = self._resolve_parent("lidar", config.id, config.parent)
        if parent is None:
            return None
        return LidarNode(
            config.fov,
            config.max_range,
            config.num_beams,
            parent,
            config.namespace,
            config.frame_id,
            pose=config.pose,
            bus=self.bus,
        )

    def step(self, dt: Optional[float] = None) -> None:
        """Advance the world by ``dt`` seconds, capped at 0.1.

        Without ``dt`` the time elapsed since the previous step is used.
        """
        if self.world is None:
            return
        now = self.bus.clock()
        if dt is None:
            last = self._last_time if self._last_time is not None else now
            dt = now - last
        self._last_time = now
        dt = min(dt, MAX_DT)

        self.world.time_tick(dt)

        if self.show_visualization:
            self.last_frame = self.world.draw()
            if self.display is not None:
                key = self.display(self.last_frame)
                if key in QUIT_KEYS:
                    logger.info("exiting simulation")
                    self.running = False

    def run(self, steps: Optional[int] = None) -> int:
        """Step at the configured rate until stopped or ``steps`` are done.

        Returns the number of steps taken.
        """
        count = 0
        while self.running and (steps is None or count < steps):
            self.step()
            count += 1
            if self.running and (steps is None or count < steps):
                self._sleep(self.period)
        return count


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multirobot_sim", description="Run a multi-robot 2D simulation."
    )
    parser.add_argument("config", nargs="?", help="JSON configuration file")
    parser.add_argument("--frequency", type=float, default=50.0, help="steps per second")
    parser.add_argument("--map-directory", default="../map/", help="directory of map images")
    parser.add_argument(
        "--no-visualization", action="store_true", help="do not render frames"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = _build_parser().parse_args(argv)
    if args.config is None:
        logger.error("usage: multirobot_sim <config_file.json>")
        logger.error("example: multirobot_sim ../config/cappero_1r.json")
        return 1

    logger.info("loading configuration from: %s", args.config)
    simulator = MultiRobotSimulator(
        sim_frequency=args.frequency,
        show_visualization=not args.no_visualization,
        map_directory=args.map_directory,
    )
    try:
        simulator.load_configuration(args.config)
    except (ConfigError, OSError) as exc:
        logger.error("failed to initialize simulation: %s", exc)
        return 1

    logger.info("simulation started; interrupt to exit")
    try:
        simulator.run()
    except KeyboardInterrupt:
        pass
    logger.info("simulation terminated")
    return 0