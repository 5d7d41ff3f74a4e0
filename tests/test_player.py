import pytest

from officeville.sim.contracts import Obstacle, WorldPoint
from officeville.sim.movement import AnimationKind
from officeville.sim.player import Player


def _desk(passable_height: float = 0.0) -> Obstacle:
    return Obstacle(
        id="desk", x=100, y=100, width=40, height=40, passable_height=passable_height
    )


def _step(
    player: Player, direction: tuple[int, int], obstacles: list[Obstacle]
) -> None:
    player.step(direction, 0.1, obstacles=obstacles, world_width=400, world_height=300)


def test_walks_at_speed_in_open_space() -> None:
    player = Player(position=WorldPoint(200, 200))

    _step(player, (1, 0), [])

    assert player.position == WorldPoint(220, 200)
    assert player.animation is AnimationKind.WALK
    assert not player.facing_left


def test_diagonal_input_is_normalised() -> None:
    player = Player(position=WorldPoint(200, 200))
    _step(player, (-1, -1), [])

    moved = player.position.distance_to(WorldPoint(200, 200))
    assert moved == pytest.approx(20)
    assert player.facing_left


def test_blocked_move_stays_put() -> None:
    player = Player(position=WorldPoint(60, 100))
    _step(player, (1, 0), [_desk()])
    assert player.position == WorldPoint(60, 100)


def test_diagonal_move_slides_along_obstacle() -> None:
    player = Player(position=WorldPoint(60, 100))

    _step(player, (1, 1), [_desk()])

    assert player.position.x == 60
    assert player.position.y == pytest.approx(100 + 20 / 2**0.5)


def test_passable_band_lets_player_under_desk() -> None:
    player = Player(position=WorldPoint(0, 0))
    assert player.collides(100, 130, [_desk()])
    assert not player.collides(100, 130, [_desk(passable_height=30)])


def test_position_is_clamped_to_world() -> None:
    player = Player(position=WorldPoint(15, 40))

    _step(player, (-1, 0), [])
    _step(player, (0, -1), [])

    assert player.position.x == pytest.approx(player.display_width / 2)
    assert player.position.y == pytest.approx(player.display_height)


def test_idle_input_stops_walking() -> None:
    player = Player(position=WorldPoint(200, 200))
    _step(player, (1, 0), [])
    _step(player, (0, 0), [])
    assert player.animation is AnimationKind.IDLE
    assert player.position == WorldPoint(220, 200)
