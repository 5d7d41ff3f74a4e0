"""Authoritative agent records and their lifecycle transitions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import random
from typing import Iterable

from officeville.sim.contracts import Obstacle, TeamDef, WorldPoint

logger = logging.getLogger("officeville.sim.roster")

SPRITE_KEYS = ("farmer0", "farmer1", "farmer2", "farmer3")
SEAT_OFFSET_X = 20
SEAT_OFFSET_Y = 30
SEAT_NUDGE_Y = 20


class LifecycleState(str, Enum):
    INACTIVE = "inactive"
    ARRIVING = "arriving"
    WORKING = "working"
    LEAVING = "leaving"


class LifecycleError(ValueError):
    """Raised on a transition the lifecycle does not allow."""


@dataclass
class AgentRecord:
    agent_id: str
    group_id: str
    member_id: str
    sprite_key: str
    desk_position: WorldPoint
    face_left: bool = False
    role: str = "Colleague"
    introduction: str = ""
    lifecycle_state: LifecycleState = LifecycleState.INACTIVE


class Roster:
    def __init__(self, records: Iterable[AgentRecord] = ()) -> None:
        self._records: dict[str, AgentRecord] = {}
        for record in records:
            if record.agent_id in self._records:
                raise ValueError(f"duplicate agent id {record.agent_id}")
            self._records[record.agent_id] = record

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records.values())

    def get(self, agent_id: str) -> AgentRecord | None:
        return self._records.get(agent_id)

    def members(self, group_id: str) -> list[AgentRecord]:
        return [r for r in self._records.values() if r.group_id == group_id]

    def in_state(self, state: LifecycleState) -> list[AgentRecord]:
        return [r for r in self._records.values() if r.lifecycle_state == state]

    def find_member(self, group_id: str, member_id: str) -> AgentRecord | None:
        for record in self._records.values():
            if record.group_id == group_id and record.member_id == member_id:
                return record
        return None

    def group_ids(self) -> list[str]:
        seen: dict[str, None] = {}
        for record in self._records.values():
            seen.setdefault(record.group_id, None)
        return list(seen)

    def all_inactive(self) -> bool:
        return all(
            record.lifecycle_state == LifecycleState.INACTIVE
            for record in self._records.values()
        )

    def begin_arrival(self, agent_id: str) -> AgentRecord:
        return self._transition(
            agent_id, LifecycleState.INACTIVE, LifecycleState.ARRIVING
        )

    def commit_arrival(self, agent_id: str) -> AgentRecord:
        return self._transition(
            agent_id, LifecycleState.ARRIVING, LifecycleState.WORKING
        )

    def begin_departure(self, agent_id: str) -> AgentRecord:
        return self._transition(
            agent_id, LifecycleState.WORKING, LifecycleState.LEAVING
        )

    def commit_departure(self, agent_id: str) -> AgentRecord:
        return self._transition(
            agent_id, LifecycleState.LEAVING, LifecycleState.INACTIVE
        )

    def reset_all(self) -> None:
        for record in self._records.values():
            record.lifecycle_state = LifecycleState.INACTIVE
        logger.info("[ROSTER] Reset %d agents to inactive", len(self._records))

    def _transition(
        self, agent_id: str, expected: LifecycleState, target: LifecycleState
    ) -> AgentRecord:
        record = self._records.get(agent_id)
        if record is None:
            raise LifecycleError(f"unknown agent {agent_id}")
        if record.lifecycle_state != expected:
            raise LifecycleError(
                f"{agent_id} cannot go {record.lifecycle_state.value} -> {target.value}"
            )
        record.lifecycle_state = target
        logger.debug("[ROSTER] %s: %s -> %s", agent_id, expected.value, target.value)
        return record


def build_roster(
    teams: Iterable[TeamDef],
    desks: Iterable[Obstacle],
    *,
    rng: random.Random | None = None,
) -> Roster:
    """Seat each team around its own desk; teams beyond the desk count sit out."""
    rng = rng or random.Random()
    available = list(desks)
    rng.shuffle(available)
    records: list[AgentRecord] = []
    team_list = list(teams)
    for team in team_list:
        if not available:
            logger.warning("[ROSTER] Ran out of desks before team %s", team.team_id)
            break
        seats = _desk_seats(available.pop())
        rng.shuffle(seats)
        for member in team.members:
            if not seats:
                logger.warning(
                    "[ROSTER] Desk for team %s is full, %s sits out",
                    team.team_id,
                    member.id,
                )
                break
            position, face_left = seats.pop()
            records.append(
                AgentRecord(
                    agent_id=f"npc_{len(records)}",
                    group_id=team.team_id,
                    member_id=member.id,
                    sprite_key=rng.choice(SPRITE_KEYS),
                    desk_position=position,
                    face_left=face_left,
                    role=member.role,
                    introduction=member.introduction,
                )
            )
    logger.info(
        "[ROSTER] Prepared %d agents across %d teams", len(records), len(team_list)
    )
    return Roster(records)


def _desk_seats(desk: Obstacle) -> list[tuple[WorldPoint, bool]]:
    left = desk.left - SEAT_OFFSET_X
    right = desk.right + SEAT_OFFSET_X
    upper = desk.top + SEAT_OFFSET_Y + SEAT_NUDGE_Y
    lower = desk.bottom - SEAT_OFFSET_Y + SEAT_NUDGE_Y
    return [
        (WorldPoint(left, upper), False),
        (WorldPoint(left, lower), False),
        (WorldPoint(right, upper), True),
        (WorldPoint(right, lower), True),
    ]
