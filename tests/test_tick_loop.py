import random

import pytest

from officeville.llm.fake_chat import FakeChatClient
from officeville.sim.office import Office
from officeville.sim.tick_loop import run_ticks
from officeville.sim.world_loader import build_demo_office


def _office() -> Office:
    return Office(
        build_demo_office(),
        chat=FakeChatClient(),
        rng=random.Random(3),
        auto_staff=False,
    )


def test_run_ticks_yields_one_payload_per_frame() -> None:
    office = _office()

    payloads = list(run_ticks(office, 5))

    assert [payload.tick for payload in payloads] == [1, 2, 3, 4, 5]
    assert payloads[-1].time_ms == 500
    assert office.time_ms == 500


def test_inputs_steer_the_player() -> None:
    office = _office()

    payloads = list(run_ticks(office, 5, inputs=lambda step: (1, 0)))

    player = payloads[-1].player
    assert player is not None
    assert player.x == pytest.approx(612)
    assert player.y == pytest.approx(280)
    assert player.moving


def test_run_stops_once_office_shuts_down() -> None:
    office = _office()
    seen = []

    for payload in run_ticks(office, 10):
        seen.append(payload.tick)
        if payload.tick == 2:
            office.shutdown()

    assert seen == [1, 2]


def test_frame_length_must_be_positive() -> None:
    with pytest.raises(ValueError):
        list(run_ticks(_office(), 1, frame_ms=0))
