import math

import numpy as np
import pytest

from multirobot_sim.geometry import Pose
from multirobot_sim.lidar import Lidar
from multirobot_sim.robot import Robot
from multirobot_sim.world import World


def world_with_wall(wall_row=60):
    grid = np.full((100, 100), 255, dtype=np.uint8)
    if wall_row is not None:
        grid[wall_row, :] = 0
    world = World()
    world.load_from_array(grid)
    return world


def test_ranges_start_unset():
    lidar = Lidar(math.pi, 5.0, 7, world_with_wall())
    assert lidar.ranges == [-1.0] * 7


def test_single_beam_hits_wall():
    world = world_with_wall(60)
    lidar = Lidar(0.0, 5.0, 1, world, Pose(1.0, 2.5, 0.0))
    lidar.time_tick(0.1)
    assert lidar.ranges[0] == pytest.approx(2.0)


def test_all_beams_measured():
    world = world_with_wall(60)
    lidar = Lidar(math.pi / 2, 5.0, 9, world, Pose(1.0, 2.5, 0.0))
    lidar.time_tick(0.1)
    assert len(lidar.ranges) == 9
    assert all(0.0 <= r <= 5.0 for r in lidar.ranges)


def test_beam_leaving_map_reports_max_range():
    world = world_with_wall(None)
    lidar = Lidar(0.0, 10.0, 1, world, Pose(1.0, 2.5, 0.0))
    lidar.time_tick(0.1)
    assert lidar.ranges == [10.0]


def test_short_range_stops_before_wall():
    world = world_with_wall(60)
    lidar = Lidar(0.0, 1.0, 1, world, Pose(1.0, 2.5, 0.0))
    lidar.time_tick(0.1)
    assert lidar.ranges[0] == pytest.approx(lidar.max_range - world.res)


def test_outside_map_leaves_ranges_untouched():
    world = world_with_wall(60)
    lidar = Lidar(0.0, 5.0, 3, world, Pose(-1.0, 2.5, 0.0))
    lidar.time_tick(0.1)
    assert lidar.ranges == [-1.0, -1.0, -1.0]


def test_lidar_on_robot_follows_robot():
    world = world_with_wall(60)
    robot = Robot(0.1, world, Pose(1.0, 2.5, 0.0))
    lidar = Lidar(0.0, 5.0, 1, robot)
    lidar.time_tick(0.1)
    first = lidar.ranges[0]
    robot.tv = 1.0
    robot.time_tick(0.5)
    lidar.time_tick(0.1)
    assert lidar.ranges[0] == pytest.approx(first - 0.5)


def test_heading_changes_what_is_seen():
    world = world_with_wall(60)
    facing = Lidar(0.0, 5.0, 1, world, Pose(1.0, 2.5, 0.0))
    away = Lidar(0.0, 1.0, 1, world, Pose(1.0, 2.5, math.pi))
    world.time_tick(0.1)
    assert facing.ranges[0] < 5.0
    assert away.ranges[0] == pytest.approx(away.max_range)


def test_draw_marks_beam_and_resets():
    world = world_with_wall(60)
    lidar = Lidar(0.0, 5.0, 1, world, Pose(1.0, 2.5, 0.0))
    lidar.time_tick(0.1)
    frame = world.draw()
    assert frame[30, 50] == 127
    assert frame[30, 10] == 255
    assert world.display_image[30, 50] == 255


def test_draw_outside_map_changes_nothing():
    world = world_with_wall(60)
    Lidar(0.0, 5.0, 1, world, Pose(-1.0, 2.5, 0.0))
    before = world.display_image.copy()
    frame = world.draw()
    assert np.array_equal(frame, before)