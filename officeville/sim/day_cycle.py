"""Office hours: a game clock plus arrival and departure pacing."""

from __future__ import annotations

from dataclasses import dataclass, field
from math import ceil
from typing import Callable

from officeville.sim.config import GAME_MINUTE_MS

DAY_START_HOUR = 6
ARRIVAL_START_HOUR = 6
ARRIVAL_END_HOUR = 11
DEPARTURE_START_HOUR = 22
DEPARTURE_END_HOUR = 4
NIGHT_END_HOUR = 6

# (minutes into the arrival window, fraction of staff that should be in)
ARRIVAL_KEYFRAMES: tuple[tuple[int, float], ...] = (
    (0, 0.0),
    (60, 0.05),
    (120, 0.15),
    (180, 0.40),
    (240, 0.80),
    (300, 1.00),
)


@dataclass
class GameClock:
    hours: int = DAY_START_HOUR
    minutes: int = 0
    minute_ms: int = GAME_MINUTE_MS
    _carry_ms: float = field(default=0.0, init=False, repr=False)

    def advance(
        self, dt_ms: float, *, on_minute: Callable[[], None] | None = None
    ) -> int:
        """Move the clock forward; returns how many game minutes ticked over.

        ``on_minute`` runs after each minute, while the clock shows that minute.
        """
        self._carry_ms += dt_ms
        ticked = 0
        while self._carry_ms >= self.minute_ms:
            self._carry_ms -= self.minute_ms
            self.tick_minute()
            ticked += 1
            if on_minute is not None:
                on_minute()
        return ticked

    def tick_minute(self) -> None:
        self.minutes += 1
        if self.minutes >= 60:
            self.hours = (self.hours + self.minutes // 60) % 24
            self.minutes %= 60

    @property
    def is_night(self) -> bool:
        return 0 <= self.hours < NIGHT_END_HOUR

    def label(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"


def arrival_progress(hours: int, minutes: int) -> float:
    """Fraction of staff expected at work; 0 outside the arrival window."""
    if not ARRIVAL_START_HOUR <= hours < ARRIVAL_END_HOUR:
        return 0.0
    elapsed = (hours - ARRIVAL_START_HOUR) * 60 + minutes
    if elapsed >= ARRIVAL_KEYFRAMES[-1][0]:
        return 1.0
    for (start_time, start_pct), (end_time, end_pct) in zip(
        ARRIVAL_KEYFRAMES, ARRIVAL_KEYFRAMES[1:]
    ):
        if start_time <= elapsed < end_time:
            into = (elapsed - start_time) / (end_time - start_time)
            return start_pct + into * (end_pct - start_pct)
    return 0.0


def arrival_target(hours: int, minutes: int, total: int) -> int:
    return ceil(arrival_progress(hours, minutes) * total)


def in_departure_window(hours: int) -> bool:
    return hours >= DEPARTURE_START_HOUR or hours < DEPARTURE_END_HOUR


def departure_probability(hours: int, minutes: int) -> float:
    """Per-minute chance a working agent heads home; 0 outside the window."""
    if not in_departure_window(hours):
        return 0.0
    if hours >= DEPARTURE_START_HOUR:
        until_end = (24 - hours) * 60 - minutes + DEPARTURE_END_HOUR * 60
    else:
        until_end = (DEPARTURE_END_HOUR - hours) * 60 - minutes
    return 1 / max(1, until_end)
