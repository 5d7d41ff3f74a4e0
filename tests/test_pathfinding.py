import random

from officeville.sim.contracts import Obstacle, WorldPoint
from officeville.sim.grid import GridModel
from officeville.sim.pathfinding import PathFinder


def _wall_grid() -> GridModel:
    # a full-height wall splits the world into two halves
    grid = GridModel(100, 100, 10)
    grid.mark_obstacles([Obstacle(id="wall", x=50, y=50, width=2, height=200)])
    return grid


def test_open_grid_path_hits_both_endpoints() -> None:
    grid = GridModel(200, 200, 10)
    finder = PathFinder(grid, rng=random.Random(1))

    path = finder.find_path(WorldPoint(12, 18), WorldPoint(177, 131))

    assert path
    assert path[0] == WorldPoint(15, 15)
    assert path[-1] == WorldPoint(175, 135)


def test_open_grid_path_simplifies_to_straight_line() -> None:
    grid = GridModel(200, 200, 10)
    finder = PathFinder(grid, rng=random.Random(1))

    path = finder.find_path(WorldPoint(15, 15), WorldPoint(175, 135), 0.0)

    assert path == [WorldPoint(15, 15), WorldPoint(175, 135)]


def test_same_cell_returns_single_waypoint() -> None:
    finder = PathFinder(GridModel(100, 100, 10), rng=random.Random(1))
    assert finder.find_path(WorldPoint(11, 11), WorldPoint(18, 12)) == [
        WorldPoint(15, 15)
    ]


def test_path_detours_around_block() -> None:
    grid = GridModel(100, 100, 10)
    grid.mark_obstacles([Obstacle(id="block", x=50, y=50, width=40, height=40)])
    finder = PathFinder(grid, rng=random.Random(3))

    path = finder.find_path(WorldPoint(5, 5), WorldPoint(95, 95), 0.0)

    assert len(path) >= 3
    assert path[0] == WorldPoint(5, 5)
    assert path[-1] == WorldPoint(95, 95)
    for point in path:
        assert not grid.is_world_point_blocked(point)
    for start, end in zip(path, path[1:]):
        assert finder.has_line_of_sight(start, end)
    assert not finder.has_line_of_sight(path[0], path[-1])


def test_blocked_start_returns_empty() -> None:
    grid = GridModel(100, 100, 10)
    grid.mark_obstacles([Obstacle(id="block", x=50, y=50, width=40, height=40)])
    finder = PathFinder(grid, rng=random.Random(1))

    assert finder.find_path(WorldPoint(50, 50), WorldPoint(5, 5)) == []


def test_blocked_goal_retargets_to_nearest_open_cell() -> None:
    grid = GridModel(100, 100, 10)
    grid.mark_obstacles([Obstacle(id="block", x=50, y=50, width=40, height=40)])
    finder = PathFinder(grid, rng=random.Random(1))

    path = finder.find_path(WorldPoint(5, 5), WorldPoint(50, 50), 0.0)

    assert path
    goal = path[-1]
    assert not grid.is_world_point_blocked(goal)
    assert goal.distance_to(WorldPoint(50, 50)) <= 40


def test_unreachable_goal_returns_empty() -> None:
    finder = PathFinder(_wall_grid(), rng=random.Random(1))
    assert finder.find_path(WorldPoint(5, 5), WorldPoint(95, 5)) == []


def test_naturalism_still_terminates_with_valid_path() -> None:
    grid = GridModel(100, 100, 10)
    grid.mark_obstacles([Obstacle(id="block", x=50, y=50, width=40, height=40)])
    finder = PathFinder(grid, rng=random.Random(42))

    for _ in range(20):
        path = finder.find_path(WorldPoint(5, 5), WorldPoint(95, 95), 1.0)
        assert path[0] == WorldPoint(5, 5)
        assert path[-1] == WorldPoint(95, 95)
        for start, end in zip(path, path[1:]):
            assert finder.has_line_of_sight(start, end)


def test_obstacle_penalty_counts_edges_as_blocked() -> None:
    finder = PathFinder(GridModel(100, 100, 10))

    assert finder.obstacle_penalty((5, 5)) == 0
    assert finder.obstacle_penalty((0, 5)) == 15
    assert finder.obstacle_penalty((0, 0)) == 25


def test_line_of_sight() -> None:
    grid = GridModel(100, 100, 10)
    grid.mark_obstacles([Obstacle(id="block", x=50, y=50, width=20, height=20)])
    finder = PathFinder(grid)

    assert finder.has_line_of_sight(WorldPoint(5, 5), WorldPoint(95, 5))
    assert not finder.has_line_of_sight(WorldPoint(5, 50), WorldPoint(95, 50))


def test_simplify_keeps_corner_waypoints() -> None:
    grid = GridModel(100, 100, 10)
    grid.mark_obstacles([Obstacle(id="block", x=50, y=50, width=20, height=20)])
    finder = PathFinder(grid)
    corner = [WorldPoint(5, 50), WorldPoint(5, 95), WorldPoint(95, 95)]

    assert finder.simplify_path(corner) == corner
    straight = [WorldPoint(5, 5), WorldPoint(15, 5), WorldPoint(25, 5)]
    assert finder.simplify_path(straight) == [WorldPoint(5, 5), WorldPoint(25, 5)]
