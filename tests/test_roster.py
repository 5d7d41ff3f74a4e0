import random

import pytest

from officeville.sim.contracts import Obstacle, TeamDef, TeamMember, WorldPoint
from officeville.sim.roster import (
    AgentRecord,
    LifecycleError,
    LifecycleState,
    Roster,
    build_roster,
)


def _team(team_id: str, *member_ids: str) -> TeamDef:
    return TeamDef(
        team_id=team_id,
        members=[TeamMember(id=member_id, role="Engineer") for member_id in member_ids],
    )


def test_build_roster_seats_team_around_one_desk() -> None:
    desk = Obstacle(id="desk", x=100, y=100, width=40, height=40)
    team = _team("core", "a", "b", "c", "d")
    roster = build_roster([team], [desk], rng=random.Random(1))

    seats = {(record.desk_position, record.face_left) for record in roster}
    assert seats == {
        (WorldPoint(60, 110), False),
        (WorldPoint(60, 110 + 20), False),
        (WorldPoint(140, 110), True),
        (WorldPoint(140, 110 + 20), True),
    }
    ids = [record.agent_id for record in roster]
    assert ids == ["npc_0", "npc_1", "npc_2", "npc_3"]
    assert all(record.lifecycle_state == LifecycleState.INACTIVE for record in roster)
    assert roster.find_member("core", "c") is not None
    assert roster.find_member("core", "z") is None


def test_extra_members_and_teams_sit_out() -> None:
    desk = Obstacle(id="desk", x=100, y=100, width=40, height=40)
    teams = [_team("core", "a", "b", "c", "d", "e"), _team("ops", "x")]

    roster = build_roster(teams, [desk], rng=random.Random(1))

    assert len(roster) == 4
    assert roster.group_ids() == ["core"]
    assert roster.find_member("core", "e") is None


def test_lifecycle_follows_legal_transitions() -> None:
    record = AgentRecord(
        agent_id="npc_0",
        group_id="core",
        member_id="a",
        sprite_key="farmer0",
        desk_position=WorldPoint(0, 0),
    )
    roster = Roster([record])

    roster.begin_arrival("npc_0")
    assert record.lifecycle_state == LifecycleState.ARRIVING
    with pytest.raises(LifecycleError):
        roster.begin_departure("npc_0")
    roster.commit_arrival("npc_0")
    assert roster.in_state(LifecycleState.WORKING) == [record]
    roster.begin_departure("npc_0")
    roster.commit_departure("npc_0")
    assert roster.all_inactive()
    with pytest.raises(LifecycleError):
        roster.commit_arrival("npc_0")
    with pytest.raises(LifecycleError):
        roster.begin_arrival("ghost")


def test_reset_all_returns_everyone_to_inactive() -> None:
    records = [
        AgentRecord(
            agent_id=f"npc_{index}",
            group_id="core",
            member_id=str(index),
            sprite_key="farmer1",
            desk_position=WorldPoint(0, 0),
            lifecycle_state=state,
        )
        for index, state in enumerate(LifecycleState)
    ]
    roster = Roster(records)

    roster.reset_all()

    assert roster.all_inactive()
    assert len(roster.members("core")) == 4


def test_duplicate_agent_ids_are_rejected() -> None:
    record = AgentRecord(
        agent_id="npc_0",
        group_id="core",
        member_id="a",
        sprite_key="farmer0",
        desk_position=WorldPoint(0, 0),
    )
    with pytest.raises(ValueError):
        Roster([record, record])
