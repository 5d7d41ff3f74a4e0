"""Simulation tunables."""

from __future__ import annotations

from dataclasses import dataclass

CELL_SIZE = 8
NPC_SPEED = 120.0
PLAYER_SPEED = 200.0
MIN_SEGMENT_LENGTH = 1.0
OBSTACLE_PENALTY = 5
SUBOPTIMAL_CHANCE = 0.2
CHARS_PER_SECOND = 15
CHUNK_SIZE = 100
MIN_CHUNK_MS = 1500
MS_PER_CHAR = 60
COOLDOWN_MS = (30_000, 60_000)
GAME_MINUTE_MS = 100
INTERACTION_DISTANCE = 50.0


@dataclass(frozen=True)
class SimConfig:
    cell_size: int = CELL_SIZE
    npc_speed: float = NPC_SPEED
    player_speed: float = PLAYER_SPEED
    suboptimal_chance: float = SUBOPTIMAL_CHANCE
    chars_per_second: float = CHARS_PER_SECOND
    chunk_size: int = CHUNK_SIZE
    cooldown_ms: tuple[int, int] = COOLDOWN_MS
    game_minute_ms: int = GAME_MINUTE_MS
    interaction_distance: float = INTERACTION_DISTANCE

    def __post_init__(self) -> None:
        if self.cell_size <= 0:
            raise ValueError("cell_size must be positive")
        if self.npc_speed <= 0 or self.player_speed <= 0:
            raise ValueError("speeds must be positive")
        if not 0.0 <= self.suboptimal_chance <= 1.0:
            raise ValueError("suboptimal_chance must be within [0, 1]")
        if self.chars_per_second <= 0:
            raise ValueError("chars_per_second must be positive")
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        low, high = self.cooldown_ms
        if low < 0 or high < low:
            raise ValueError("cooldown_ms must be a non-negative (low, high) range")
        if self.game_minute_ms <= 0:
            raise ValueError("game_minute_ms must be positive")
