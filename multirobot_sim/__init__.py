"""A 2D multi-robot simulator with occupancy-grid maps, robots, lidars and an in-process message bus."""

__version__ = "0.1.0"