"""Visible runtime state: sprites, speech bubbles and desk accessories."""

from __future__ import annotations

from dataclasses import dataclass, field

from officeville.sim.contracts import (
    AccessorySnapshot,
    AgentSnapshot,
    BubbleSnapshot,
    WorldPoint,
)
from officeville.sim.movement import AnimationKind

LAPTOP_OFFSET_X = 43
LAPTOP_OFFSET_Y = -25


@dataclass
class Sprite:
    """On-stage body of an agent; satisfies ``Movable``."""

    agent_id: str
    sprite_key: str
    position: WorldPoint
    animation: AnimationKind = AnimationKind.IDLE
    flip_x: bool = False
    active: bool = True

    @property
    def animation_key(self) -> str:
        return f"{self.sprite_key}_{self.animation.value}"

    def play(self, animation: AnimationKind) -> None:
        self.animation = animation

    def set_flip_x(self, flip: bool) -> None:
        self.flip_x = flip


@dataclass
class Bubble:
    text: str
    expires_at_ms: float


@dataclass(frozen=True)
class Accessory:
    kind: str
    position: WorldPoint
    flip_x: bool


def laptop_for(sprite: Sprite, *, face_left: bool) -> Accessory:
    offset_x = -LAPTOP_OFFSET_X if face_left else LAPTOP_OFFSET_X
    return Accessory(
        kind="laptop",
        position=WorldPoint(
            sprite.position.x + offset_x, sprite.position.y + LAPTOP_OFFSET_Y
        ),
        flip_x=not face_left,
    )


@dataclass
class Stage:
    now_ms: float = 0.0
    sprites: dict[str, Sprite] = field(default_factory=dict)
    bubbles: dict[str, Bubble] = field(default_factory=dict)
    accessories: dict[str, Accessory] = field(default_factory=dict)

    def spawn(self, agent_id: str, sprite_key: str, position: WorldPoint) -> Sprite:
        sprite = Sprite(agent_id=agent_id, sprite_key=sprite_key, position=position)
        self.sprites[agent_id] = sprite
        return sprite

    def remove(self, agent_id: str) -> None:
        sprite = self.sprites.pop(agent_id, None)
        if sprite is not None:
            sprite.active = False
        self.bubbles.pop(agent_id, None)
        self.accessories.pop(agent_id, None)

    def clear(self) -> None:
        for sprite in self.sprites.values():
            sprite.active = False
        self.sprites.clear()
        self.bubbles.clear()
        self.accessories.clear()

    def show_bubble(self, agent_id: str, text: str, duration_ms: float) -> None:
        expires_at_ms = self.now_ms + duration_ms
        self.bubbles[agent_id] = Bubble(text=text, expires_at_ms=expires_at_ms)

    def attach(self, agent_id: str, accessory: Accessory) -> None:
        self.accessories[agent_id] = accessory

    def detach(self, agent_id: str) -> Accessory | None:
        return self.accessories.pop(agent_id, None)

    def expire_bubbles(self, now_ms: float) -> None:
        self.now_ms = now_ms
        expired = [
            agent_id
            for agent_id, bubble in self.bubbles.items()
            if bubble.expires_at_ms <= now_ms
        ]
        for agent_id in expired:
            del self.bubbles[agent_id]

    def agent_snapshots(
        self, states: dict[str, str], groups: dict[str, str]
    ) -> list[AgentSnapshot]:
        return [
            AgentSnapshot(
                agent_id=sprite.agent_id,
                group_id=groups.get(sprite.agent_id),
                state=states.get(sprite.agent_id, "unknown"),
                x=sprite.position.x,
                y=sprite.position.y,
                flip_x=sprite.flip_x,
                animation=sprite.animation.value,
                moving=sprite.animation is AnimationKind.WALK,
            )
            for sprite in self.sprites.values()
        ]

    def bubble_snapshots(self) -> list[BubbleSnapshot]:
        return [
            BubbleSnapshot(
                agent_id=agent_id, text=bubble.text, expires_at_ms=bubble.expires_at_ms
            )
            for agent_id, bubble in self.bubbles.items()
        ]

    def accessory_snapshots(self) -> list[AccessorySnapshot]:
        return [
            AccessorySnapshot(
                agent_id=agent_id,
                kind=accessory.kind,
                x=accessory.position.x,
                y=accessory.position.y,
                flip_x=accessory.flip_x,
            )
            for agent_id, accessory in self.accessories.items()
        ]
