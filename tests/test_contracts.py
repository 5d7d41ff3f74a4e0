import pytest
from pydantic import ValidationError

from officeville.sim.contracts import (
    DialogueEntry,
    Event,
    Obstacle,
    OfficeConfig,
    TickPayload,
    WorldPoint,
)


def test_obstacle_edges_include_scale_and_passable_band() -> None:
    desk = Obstacle(
        id="desk", x=100, y=100, width=40, height=20, scale_x=2, passable_height=5
    )

    assert (desk.left, desk.right) == (60, 140)
    assert (desk.top, desk.bottom) == (90, 110)
    assert desk.solid_bottom == 105


def test_dialogue_entry_accepts_alternate_keys() -> None:
    entry = DialogueEntry.model_validate(
        {"speakerId": "pm", "line": "Ship it.", "tokenCount": 40}
    )

    assert entry.speaker_id == "pm"
    assert entry.text == "Ship it."
    assert entry.weight == 40
    assert DialogueEntry(speaker_id="pm", text="Ship it.").weight == 8


def test_office_config_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        OfficeConfig.model_validate(
            {"world_width": 10, "world_height": 10, "ceiling": "high"}
        )


def test_tick_payload_round_trip() -> None:
    payload = TickPayload(
        tick=1,
        time_ms=100,
        clock="06:00",
        events=[Event(kind="ARRIVED", payload={"agent_id": "npc_0"})],
    )

    restored = TickPayload.model_validate_json(payload.model_dump_json())

    assert restored == payload
    assert WorldPoint(0, 0).distance_to(WorldPoint(3, 4)) == 5
