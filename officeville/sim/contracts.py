"""Core data contracts for the office simulation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import hypot
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


@dataclass(frozen=True)
class WorldPoint:
    x: float
    y: float

    def distance_to(self, other: "WorldPoint") -> float:
        return hypot(other.x - self.x, other.y - self.y)


class ObstacleKind(str, Enum):
    DESK = "desk"
    BOX = "box"


class Obstacle(BaseModel):
    """World-space rectangle centred on (x, y).

    The bottom ``passable_height`` units stay walkable, like the gap under a
    desk.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    x: float
    y: float
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    scale_x: float = Field(default=1.0, gt=0)
    scale_y: float = Field(default=1.0, gt=0)
    passable_height: float = Field(default=0.0, ge=0)
    kind: ObstacleKind = ObstacleKind.DESK

    @property
    def half_width(self) -> float:
        return self.width * self.scale_x / 2

    @property
    def half_height(self) -> float:
        return self.height * self.scale_y / 2

    @property
    def left(self) -> float:
        return self.x - self.half_width

    @property
    def right(self) -> float:
        return self.x + self.half_width

    @property
    def top(self) -> float:
        return self.y - self.half_height

    @property
    def bottom(self) -> float:
        return self.y + self.half_height

    @property
    def solid_bottom(self) -> float:
        return self.bottom - self.passable_height


class DialogueEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    speaker_id: str = Field(validation_alias=AliasChoices("speaker_id", "speakerId"))
    text: str = Field(validation_alias=AliasChoices("text", "line", "message"))
    token_count: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("token_count", "tokenCount", "token"),
    )

    @property
    def weight(self) -> int:
        """Characters this line occupies on the reading clock."""
        return self.token_count if self.token_count else len(self.text)


class TeamMember(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    role: str = "Colleague"
    introduction: str = ""


class TeamDef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    team_id: str
    members: list[TeamMember] = Field(default_factory=list)
    conversation: list[dict[str, Any]] = Field(default_factory=list)


class OfficeConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    world_width: float = Field(gt=0)
    world_height: float = Field(gt=0)
    desks: list[Obstacle] = Field(default_factory=list)
    boxes: list[Obstacle] = Field(default_factory=list)
    teams: list[TeamDef] = Field(default_factory=list)
    player_start: tuple[float, float] | None = None

    @model_validator(mode="after")
    def validate_office(self) -> "OfficeConfig":
        ids = [obstacle.id for obstacle in [*self.desks, *self.boxes]]
        if len(ids) != len(set(ids)):
            raise ValueError("obstacle ids must be unique")
        team_ids = [team.team_id for team in self.teams]
        if len(team_ids) != len(set(team_ids)):
            raise ValueError("team ids must be unique")
        return self

    @property
    def obstacles(self) -> list[Obstacle]:
        return [*self.desks, *self.boxes]


class Event(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str
    payload: dict[str, Any] = Field(default_factory=dict)


class AgentSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    agent_id: str
    group_id: str | None = None
    state: str
    x: float
    y: float
    flip_x: bool = False
    animation: str = "idle"
    moving: bool = False


class BubbleSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    agent_id: str
    text: str
    expires_at_ms: float


class AccessorySnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    agent_id: str
    kind: str
    x: float
    y: float
    flip_x: bool = False


class TickPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick: int
    time_ms: float
    clock: str
    night: bool = False
    agents: list[AgentSnapshot] = Field(default_factory=list)
    player: AgentSnapshot | None = None
    bubbles: list[BubbleSnapshot] = Field(default_factory=list)
    accessories: list[AccessorySnapshot] = Field(default_factory=list)
    events: list[Event] | None = None
    interaction_agent_id: str | None = None
