"""Occupancy grid rasterised from static obstacles."""

from __future__ import annotations

import logging
from math import ceil, floor
from typing import Iterable, Iterator

from officeville.sim.contracts import Obstacle, WorldPoint

logger = logging.getLogger("officeville.sim.grid")

Cell = tuple[int, int]


class GridConfigError(ValueError):
    """Raised when the grid cannot be built from the given dimensions."""


class GridModel:
    def __init__(self, world_width: float, world_height: float, cell_size: int) -> None:
        self.cell_size = cell_size
        self.world_width = world_width
        self.world_height = world_height
        self.width = 0
        self.height = 0
        self._cells: list[list[bool]] = []
        self.initialize(world_width, world_height, cell_size)

    def initialize(
        self, world_width: float, world_height: float, cell_size: int
    ) -> None:
        """Rebuild an all-clear grid; any marked obstacles are discarded."""
        if cell_size <= 0:
            raise GridConfigError(f"cell size must be positive, got {cell_size}")
        width = ceil(world_width / cell_size)
        height = ceil(world_height / cell_size)
        if width <= 0 or height <= 0:
            raise GridConfigError(
                f"grid for world {world_width}x{world_height} would be empty"
            )
        self.cell_size = cell_size
        self.world_width = world_width
        self.world_height = world_height
        self.width = width
        self.height = height
        self._cells = [[False] * width for _ in range(height)]
        logger.info(
            "[GRID] Initialised %dx%d grid (cell size %d)", width, height, cell_size
        )

    def mark_obstacles(self, obstacles: Iterable[Obstacle]) -> int:
        """Mark each obstacle's buffered footprint; returns newly occupied cells."""
        marked = 0
        buffer = self.cell_size
        for obstacle in obstacles:
            left = floor((obstacle.left - buffer) / self.cell_size)
            right = ceil((obstacle.right + buffer) / self.cell_size)
            top = floor((obstacle.top - buffer) / self.cell_size)
            bottom = ceil((obstacle.solid_bottom + buffer) / self.cell_size)
            for y in range(max(0, top), min(self.height, bottom)):
                row = self._cells[y]
                for x in range(max(0, left), min(self.width, right)):
                    if not row[x]:
                        row[x] = True
                        marked += 1
        logger.info("[GRID] Marked %d obstacle cells", marked)
        return marked

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_walkable(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and not self._cells[y][x]

    def is_world_point_blocked(self, point: WorldPoint) -> bool:
        return not self.is_walkable(*self.world_to_grid(point))

    def world_to_grid(self, point: WorldPoint) -> Cell:
        return floor(point.x / self.cell_size), floor(point.y / self.cell_size)

    def grid_to_world(self, x: int, y: int) -> WorldPoint:
        half = self.cell_size / 2
        return WorldPoint(x * self.cell_size + half, y * self.cell_size + half)

    def occupied_cells(self) -> Iterator[Cell]:
        for y, row in enumerate(self._cells):
            for x, occupied in enumerate(row):
                if occupied:
                    yield x, y

    def snapshot(self) -> tuple[tuple[bool, ...], ...]:
        return tuple(tuple(row) for row in self._cells)
