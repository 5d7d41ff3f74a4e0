"""The player-controlled agent."""

from __future__ import annotations

from dataclasses import dataclass
from math import hypot
from typing import Iterable

from officeville.sim.config import PLAYER_SPEED
from officeville.sim.contracts import AgentSnapshot, Obstacle, WorldPoint
from officeville.sim.movement import AnimationKind

PLAYER_ID = "player"
# 56x83 sheet cut 3x4, drawn at 2.5x
DISPLAY_WIDTH = 56 / 3 * 2.5
DISPLAY_HEIGHT = 83 / 4 * 2.5


@dataclass
class Player:
    position: WorldPoint
    agent_id: str = PLAYER_ID
    display_width: float = DISPLAY_WIDTH
    display_height: float = DISPLAY_HEIGHT
    speed: float = PLAYER_SPEED
    animation: AnimationKind = AnimationKind.IDLE
    flip_x: bool = False
    active: bool = True

    def play(self, animation: AnimationKind) -> None:
        self.animation = animation

    def set_flip_x(self, flip: bool) -> None:
        self.flip_x = flip

    @property
    def facing_left(self) -> bool:
        return self.flip_x

    def step(
        self,
        direction: tuple[int, int],
        dt: float,
        *,
        obstacles: Iterable[Obstacle],
        world_width: float,
        world_height: float,
    ) -> None:
        """Walk one frame in ``direction``, sliding along whatever blocks the way."""
        dx, dy = direction
        if dx < 0:
            self.set_flip_x(True)
        elif dx > 0:
            self.set_flip_x(False)
        moving = dx != 0 or dy != 0
        self.play(AnimationKind.WALK if moving else AnimationKind.IDLE)

        solids = list(obstacles)
        x, y = self.position.x, self.position.y
        if moving:
            length = hypot(dx, dy)
            new_x = x + dx / length * self.speed * dt
            new_y = y + dy / length * self.speed * dt
            if not self.collides(new_x, new_y, solids):
                x, y = new_x, new_y
            elif not self.collides(new_x, y, solids):
                x = new_x
            elif not self.collides(x, new_y, solids):
                y = new_y

        half = self.display_width / 2
        x = min(max(x, half), world_width - half)
        y = min(max(y, self.display_height), world_height)
        self.position = WorldPoint(x, y)

    def collides(self, x: float, y: float, obstacles: Iterable[Obstacle]) -> bool:
        body_left = x - self.display_width / 4
        body_top = y - self.display_height / 2
        body_right = body_left + self.display_width / 2
        body_bottom = body_top + self.display_height / 2
        for obstacle in obstacles:
            if (
                body_right >= obstacle.left
                and body_left <= obstacle.right
                and body_bottom >= obstacle.top
                and body_top <= obstacle.solid_bottom
            ):
                return True
        return False

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            agent_id=self.agent_id,
            state="player",
            x=self.position.x,
            y=self.position.y,
            flip_x=self.flip_x,
            animation=self.animation.value,
            moving=self.animation is AnimationKind.WALK,
        )
