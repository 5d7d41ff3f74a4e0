"""Fixed-step frame loop for headless runs."""

from __future__ import annotations

from typing import Callable, Iterable

from officeville.sim.contracts import TickPayload
from officeville.sim.office import Office

FRAME_MS = 100.0


def run_ticks(
    office: Office,
    ticks: int | None,
    *,
    frame_ms: float = FRAME_MS,
    inputs: Callable[[int], tuple[int, int]] | None = None,
) -> Iterable[TickPayload]:
    """Advance ``office`` one frame at a time, yielding each frame's snapshot.

    ``inputs`` maps the step number to the player's direction for that frame.
    Runs forever when ``ticks`` is None; stops early once the office shuts down.
    """
    if frame_ms <= 0:
        raise ValueError("frame_ms must be positive")
    step_count = 0
    while ticks is None or step_count < ticks:
        if office.is_shut_down:
            return
        direction = inputs(step_count) if inputs is not None else (0, 0)
        yield office.update(frame_ms, player_input=direction)
        step_count += 1
