"""Grid-based pathfinding (A*) with naturalistic detours."""

from __future__ import annotations

from collections import deque
import heapq
from itertools import count
import logging
from math import inf
import random

from officeville.sim.config import OBSTACLE_PENALTY, SUBOPTIMAL_CHANCE
from officeville.sim.contracts import WorldPoint
from officeville.sim.grid import Cell, GridModel

logger = logging.getLogger("officeville.sim.pathfinding")

DIRECTIONS: tuple[Cell, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))


class PathFinder:
    def __init__(self, grid: GridModel, *, rng: random.Random | None = None) -> None:
        self._grid = grid
        self._rng = rng or random.Random()

    @property
    def grid(self) -> GridModel:
        return self._grid

    def find_path(
        self,
        start: WorldPoint,
        end: WorldPoint,
        suboptimal_chance: float = SUBOPTIMAL_CHANCE,
    ) -> list[WorldPoint]:
        """Return simplified world waypoints from start to end, or [] on failure."""
        start_cell = self._grid.world_to_grid(start)
        goal = self._grid.world_to_grid(end)

        if not self._grid.is_walkable(*start_cell):
            logger.warning("[PATH] Start %s is blocked", start_cell)
            return []
        if not self._grid.is_walkable(*goal):
            nearest = self.find_nearest_walkable(goal)
            if nearest is None:
                logger.warning("[PATH] No walkable cell near blocked goal %s", goal)
                return []
            logger.debug("[PATH] Goal %s blocked, retargeting to %s", goal, nearest)
            goal = nearest

        tie = count()
        open_set: list[tuple[int, int, Cell]] = []
        start_priority = self._heuristic(start_cell, goal)
        heapq.heappush(open_set, (start_priority, next(tie), start_cell))
        closed: set[Cell] = set()
        came_from: dict[Cell, Cell] = {}
        g_score: dict[Cell, float] = {start_cell: 0}

        while open_set:
            if len(open_set) > 1 and self._rng.random() < suboptimal_chance:
                best = heapq.heappop(open_set)
                _, _, current = heapq.heappop(open_set)
                heapq.heappush(open_set, best)
            else:
                _, _, current = heapq.heappop(open_set)

            if current in closed:
                continue
            if current == goal:
                return self._reconstruct_path(came_from, current)
            closed.add(current)

            for neighbor in self._neighbors(current):
                if neighbor in closed:
                    continue
                tentative = g_score[current] + 1
                if tentative < g_score.get(neighbor, inf):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative
                    priority = (
                        tentative
                        + self._heuristic(neighbor, goal)
                        + self.obstacle_penalty(neighbor)
                    )
                    heapq.heappush(open_set, (priority, next(tie), neighbor))

        logger.warning("[PATH] No path from %s to %s", start_cell, goal)
        return []

    def find_nearest_walkable(self, cell: Cell) -> Cell | None:
        """Breadth-first search outward from ``cell`` for the closest open cell."""
        queue: deque[Cell] = deque([cell])
        visited = {cell}
        while queue:
            current = queue.popleft()
            if self._grid.is_walkable(*current):
                return current
            x, y = current
            for dx, dy in DIRECTIONS:
                candidate = (x + dx, y + dy)
                if candidate in visited or not self._grid.in_bounds(*candidate):
                    continue
                visited.add(candidate)
                queue.append(candidate)
        return None

    def obstacle_penalty(self, cell: Cell) -> int:
        x, y = cell
        penalty = 0
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                if not self._grid.is_walkable(x + dx, y + dy):
                    penalty += OBSTACLE_PENALTY
        return penalty

    def has_line_of_sight(self, start: WorldPoint, end: WorldPoint) -> bool:
        x, y = self._grid.world_to_grid(start)
        end_x, end_y = self._grid.world_to_grid(end)
        dx = abs(end_x - x)
        dy = -abs(end_y - y)
        step_x = 1 if x < end_x else -1
        step_y = 1 if y < end_y else -1
        err = dx + dy
        while True:
            if not self._grid.is_walkable(x, y):
                return False
            if x == end_x and y == end_y:
                return True
            doubled = 2 * err
            if doubled >= dy:
                err += dy
                x += step_x
            if doubled <= dx:
                err += dx
                y += step_y

    def simplify_path(self, path: list[WorldPoint]) -> list[WorldPoint]:
        if len(path) < 3:
            return list(path)
        simplified = [path[0]]
        for index in range(2, len(path)):
            if not self.has_line_of_sight(simplified[-1], path[index]):
                simplified.append(path[index - 1])
        simplified.append(path[-1])
        return simplified

    def _neighbors(self, current: Cell) -> list[Cell]:
        x, y = current
        candidates = [(x + dx, y + dy) for dx, dy in DIRECTIONS]
        return [pos for pos in candidates if self._grid.is_walkable(*pos)]

    @staticmethod
    def _heuristic(a: Cell, b: Cell) -> int:
        return abs(a[0] - b[0]) + abs(a[1] - b[1])

    def _reconstruct_path(
        self, came_from: dict[Cell, Cell], current: Cell
    ) -> list[WorldPoint]:
        cells = [current]
        while current in came_from:
            current = came_from[current]
            cells.append(current)
        cells.reverse()
        waypoints = [self._grid.grid_to_world(x, y) for x, y in cells]
        simplified = self.simplify_path(waypoints)
        logger.debug(
            "[PATH] Found %d cells, %d waypoints after simplification",
            len(cells),
            len(simplified),
        )
        return simplified
