import random
from math import ceil
from typing import Iterator

from officeville.llm.fake_chat import FakeChatClient
from officeville.sim.config import SimConfig
from officeville.sim.contracts import Event, WorldPoint
from officeville.sim.interaction import BUSY_TEXT, NOT_READY_TEXT, reply_duration_ms
from officeville.sim.office import Office
from officeville.sim.roster import LifecycleState
from officeville.sim.world_loader import build_demo_office


class _BrokenChat(FakeChatClient):
    def send(self, session_id: str, message: str) -> Iterator[str]:
        raise RuntimeError("backend down")


def _office(**kwargs) -> Office:
    kwargs.setdefault("rng", random.Random(7))
    kwargs.setdefault("chat", FakeChatClient())
    kwargs.setdefault("auto_staff", False)
    return Office(build_demo_office(), **kwargs)


def _run(office: Office, frames: int) -> list[Event]:
    events: list[Event] = []
    for _ in range(frames):
        events.extend(office.update(100).events or [])
    return events


def _staff_everyone(office: Office) -> list[Event]:
    while office.spawn_and_move():
        pass
    return _run(office, 150)


def test_entrance_and_exit_are_open_floor() -> None:
    office = _office()
    assert office.entrance == WorldPoint(512, 194)
    assert office.exit == WorldPoint(731, 194)
    assert not office.grid.is_world_point_blocked(office.entrance)
    assert not office.grid.is_world_point_blocked(office.exit)


def test_everyone_arrives_and_gets_a_laptop() -> None:
    office = _office()

    events = _staff_everyone(office)

    assert office.roster.in_state(LifecycleState.WORKING) == list(office.roster)
    arrived = [event for event in events if event.kind == "ARRIVED"]
    assert len(arrived) == len(office.roster) == 9
    payload = office.snapshot()
    assert len(payload.accessories) == 9
    assert all(not agent.moving for agent in payload.agents)
    for record in office.roster:
        sprite = office.stage.sprites[record.agent_id]
        assert sprite.flip_x == record.face_left


def test_full_team_starts_talking() -> None:
    office = _office()

    events = _staff_everyone(office)

    started = {
        event.payload["group_id"] for event in events if event.kind == "ROUND_STARTED"
    }
    assert started == {"product", "platform", "sales"}
    speakers = {event.payload["agent_id"] for event in events if event.kind == "LINE"}
    assert speakers <= {record.agent_id for record in office.roster}
    assert len(speakers) >= 3


def test_departure_walks_to_exit_and_cleans_up() -> None:
    office = _office()
    _staff_everyone(office)
    record = office.roster.in_state(LifecycleState.WORKING)[0]

    assert office.make_one_leave(record.agent_id)
    assert record.lifecycle_state == LifecycleState.LEAVING
    assert record.agent_id not in office.stage.accessories
    events = _run(office, 150)

    assert record.lifecycle_state == LifecycleState.INACTIVE
    assert record.agent_id not in office.stage.sprites
    assert record.agent_id not in office.controllers
    assert any(
        event.kind == "DEPARTED" and event.payload["agent_id"] == record.agent_id
        for event in events
    )
    assert not office.make_one_leave(record.agent_id)


def test_make_all_leave_empties_the_office() -> None:
    office = _office()
    _staff_everyone(office)

    assert office.make_all_leave() == 9
    _run(office, 200)

    assert office.roster.all_inactive()
    assert office.stage.sprites == {}
    assert office.controllers == {}
    assert office.make_all_leave() == 0


def test_interaction_pauses_simulation_time() -> None:
    office = _office()
    _staff_everyone(office)
    record = office.roster.in_state(LifecycleState.WORKING)[0]
    sprite = office.stage.sprites[record.agent_id]
    office.player.position = WorldPoint(sprite.position.x - 20, sprite.position.y)
    office.player.set_flip_x(False)

    session = office.begin_interaction()

    assert session is not None
    assert session.agent_id == record.agent_id
    assert office.paused
    frozen = office.time_ms
    payload = office.update(100)
    assert payload.time_ms == frozen
    assert payload.interaction_agent_id == record.agent_id
    assert any(event.kind == "INTERACTION_STARTED" for event in payload.events or [])

    session.say("how is it going?")
    office.end_interaction()

    assert not office.paused
    assert session.closed
    payload = office.update(100)
    assert payload.time_ms == frozen + 100
    assert any(event.kind == "INTERACTION_ENDED" for event in payload.events or [])


def test_interaction_with_unready_model_shows_notice() -> None:
    office = _office(chat=FakeChatClient(ready=False))
    _staff_everyone(office)
    record = office.roster.in_state(LifecycleState.WORKING)[0]

    assert office.begin_interaction(record.agent_id) is None
    assert not office.paused
    assert office.stage.bubbles["player"].text == NOT_READY_TEXT


def test_day_cycle_staffs_the_office() -> None:
    office = _office(auto_staff=True, sim_config=SimConfig(game_minute_ms=1))

    _run(office, 3)

    assert office.clock.label() == "11:00"
    assert office.roster.in_state(LifecycleState.INACTIVE) == []


def test_shutdown_is_idempotent_and_freezes_the_office() -> None:
    office = _office()
    _staff_everyone(office)
    office.make_one_leave()

    office.shutdown()
    office.shutdown()

    assert office.is_shut_down
    assert office.timers.pending_count() == 0
    assert office.controllers == {}
    frozen = office.time_ms
    assert office.update(100).time_ms == frozen
    assert office.spawn_and_move() is None


def test_each_game_minute_is_evaluated_at_its_own_time() -> None:
    office = _office(auto_staff=True, sim_config=SimConfig(game_minute_ms=10))
    seen: list[str] = []
    office._on_game_minute = lambda: seen.append(office.clock.label())

    office.update(100)

    assert seen == [f"06:{minute:02d}" for minute in range(1, 11)]


def test_ui_snapshot_leaves_events_for_the_next_frame() -> None:
    office = _office()
    office.spawn_and_move()

    peek = office.snapshot(drain_events=False)
    payload = office.update(100)

    assert [event.kind for event in peek.events or []] == ["ARRIVING"]
    assert [event.kind for event in payload.events or []][:1] == ["ARRIVING"]
    assert office.snapshot().events is None


def test_interaction_ends_itself_after_reply() -> None:
    office = _office()
    _staff_everyone(office)
    record = office.roster.in_state(LifecycleState.WORKING)[0]
    session = office.begin_interaction(record.agent_id)
    assert session is not None

    reply = session.say("hi")
    frozen = office.time_ms
    frames = ceil(reply_duration_ms(reply) / 100)
    _run(office, frames - 1)

    assert office.paused
    assert office.time_ms == frozen
    events = _run(office, 1)
    assert not office.paused
    assert session.closed
    assert any(event.kind == "INTERACTION_ENDED" for event in events)


def test_chat_failure_shows_busy_bubble_and_resumes() -> None:
    office = _office(chat=_BrokenChat())
    _staff_everyone(office)
    record = office.roster.in_state(LifecycleState.WORKING)[0]
    session = office.begin_interaction(record.agent_id)
    assert session is not None

    assert session.say("are you there?") == ""

    assert office.paused
    assert office.stage.bubbles[record.agent_id].text == BUSY_TEXT
    _run(office, 35)
    assert not office.paused
    assert session.closed
