# multirobot-sim

A small two-dimensional simulator for several robots moving on an
occupancy-grid map. Robots are discs driven by linear and angular velocity
commands; lidar sensors cast beams through the map and report ranges.
Items can be attached to one another, so a lidar mounted on a robot moves
with it.

Each simulated robot publishes odometry and a transform on an in-process
message bus and listens there for velocity commands; each lidar publishes
laser scans and its own transform on the same bus.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## The map

The map is a grayscale image (any format Pillow can read; colour images
are converted to gray). Pixels darker than 127 are obstacles, everything
else is free space. One pixel is 0.05 m, so 20 pixels make a metre. A
world position `(x, y)` in metres maps to the grid cell at row `x * 20`,
column `y * 20`.

A robot moves only if the disc it would occupy after the move stays inside
the map and touches no obstacle; otherwise it stays where it is.

## Configuration

A simulation is described by a JSON file:

```json
{
  "map": "office.png",
  "items": [
    {
      "id": 0,
      "type": "robot",
      "frame_id": "robot_0",
      "namespace": "robot_0",
      "radius": 0.2,
      "max_rv": 1.0,
      "max_tv": 1.0,
      "pose": [5.0, 5.0, 0.0],
      "parent": -1
    },
    {
      "id": 1,
      "type": "lidar",
      "frame_id": "lidar_0",
      "namespace": "robot_0",
      "fov": 3.14,
      "max_range": 10.0,
      "num_beams": 180,
      "pose": [0.0, 0.0, 0.0],
      "parent": 0
    }
  ]
}
```

- `map` (a string) names the map image; `items` (an array) lists robots
  and lidars. If either is missing or of the wrong kind, the configuration
  is rejected.
- Every field shown above is required for its type. `id`, `parent` and
  `num_beams` must be integers; `radius`, `max_rv`, `max_tv`, `fov` and
  `max_range` must be numbers; `frame_id` and `namespace` must be strings.
- `pose` must be an array. An array of three numbers is read as
  `[x, y, theta]` in metres and radians, relative to the parent; an array
  of any other length is read as the identity pose.
- `parent` is the `id` of the item this one is attached to, or `-1` to
  place it directly in the world.
- Items with a missing or unknown `type`, and items whose fields are
  invalid, are skipped with a warning.

Robots are created first, in file order, then lidars. An item can only be
attached to an item created before it; an item whose parent is not found
is left out with an error message.

## Running

```
multirobot-sim path/to/config.json
```

The command loads the configuration, loads the map from the map directory
joined with the `map` file name, builds the world and steps it at the
chosen rate until interrupted (Ctrl-C). Options:

- `--frequency HZ` — steps per second (default 50).
- `--map-directory DIR` — where map images are looked up (default `../map/`).
- `--no-visualization` — do not render a frame at each step.

It exits with status 1 if no configuration file is given or if the
configuration or map cannot be loaded.

## Using it from Python

```python
from multirobot_sim.config import load_config, format_config

config = load_config("path/to/config.json")
print(format_config(config))
```

`load_config` raises `ConfigError` (a `ValueError`) when the file cannot be
read, is not valid JSON, or lacks a valid `map` or `items` entry.
`parse_config` does the same work on data already decoded from JSON;
`parse_robot`, `parse_lidar` and `parse_pose` handle single entries.

Driving a robot over the message bus:

```python
import numpy as np

from multirobot_sim.geometry import Pose
from multirobot_sim.messages import MessageBus, Twist
from multirobot_sim.robot_node import RobotNode
from multirobot_sim.world import World

world = World()
world.load_from_array(np.full((200, 200), 255, dtype=np.uint8))

bus = MessageBus()
robot = RobotNode(0.2, world, "robot_0", "robot_0", pose=Pose(5.0, 5.0, 0.0), bus=bus)

bus.publish("/robot_0/cmd_vel", Twist(linear=(0.5, 0.0, 0.0)))
world.time_tick(0.1)

odom = bus.latest["/robot_0/odom"]
print(odom.position)
```

The pieces:

- `multirobot_sim.geometry.Pose` — a 2D rigid transform `(x, y, theta)`,
  with the angle kept in `[-pi, pi]`; poses compose with `*` and map points
  with `apply`.
- `multirobot_sim.world.World` — the occupancy grid, with
  `load_from_image`, `load_from_array`, `at`, `inside`, `collides`,
  `traverse_beam` and the conversions `world2grid` and `grid2world`.
  `time_tick(dt)` advances every item; `draw()` renders all items and
  returns the frame as a numpy array.
- `multirobot_sim.world.WorldItem` — the base class of everything placed
  in the world; `pose_in_world()` composes the poses up the parent chain.
- `multirobot_sim.robot.Robot` — a disc with velocities `tv` and `rv`.
- `multirobot_sim.lidar.Lidar` — `num_beams` beams spread over `fov`
  radians; after each tick `ranges` holds the measured distances, with
  `max_range` where a beam hits nothing in range or leaves the map.
- `multirobot_sim.robot_node.RobotNode` — a robot that listens on
  `/<namespace>/cmd_vel` (commands are clamped to `max_tv` and `max_rv`),
  and on every tick publishes `Odometry` on `/<namespace>/odom` and a
  `map` → `frame_id` transform.
- `multirobot_sim.lidar_node.LidarNode` — a lidar that on every tick
  publishes a `LaserScan` on `/<namespace>/base_scan` (ranges outside
  `[0.1, max_range]` become infinity) and a transform: relative to
  `<namespace>_base_link` when attached to a parent, otherwise to `map`.
- `multirobot_sim.messages` — the message dataclasses (`Header`,
  `Quaternion`, `Twist`, `Odometry`, `LaserScan`, `TransformStamped`),
  `quaternion_from_yaw`, and `MessageBus`, which calls topic subscribers,
  keeps the latest message of each topic in `latest` and the latest
  transform of each child frame in `transforms`.
- `multirobot_sim.simulator.MultiRobotSimulator` — ties it all together
  with `load_configuration`, `initialize`, `step` and `run`. A step's `dt`
  is capped at 0.1 s. A `display` callback, if given, receives each
  rendered frame; returning ESC (27) or `q` stops `run`.

## What it does not do

- It opens no window. Frames are rendered into numpy arrays; showing them
  is up to a `display` callback supplied from Python. The command-line
  tool supplies none, so it is stopped by interrupting it.
- Messages travel only on the in-process `MessageBus`; nothing is sent
  over a network or to other processes.