"""Delayed callbacks driven by the host frame clock."""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
from itertools import count
import logging
from typing import Callable

logger = logging.getLogger("officeville.sim.timers")


@dataclass(eq=False)
class TimerHandle:
    due_ms: float
    callback: Callable[[], None] | None
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        if not self.pending:
            return
        self.cancelled = True
        self.callback = None


@dataclass
class TimerQueue:
    now_ms: float = 0.0
    _heap: list[tuple[float, int, TimerHandle]] = field(
        default_factory=list, init=False, repr=False
    )
    _sequence: count = field(default_factory=count, init=False, repr=False)

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(due_ms=self.now_ms + max(0.0, delay_ms), callback=callback)
        heapq.heappush(self._heap, (handle.due_ms, next(self._sequence), handle))
        return handle

    def advance(self, now_ms: float) -> int:
        """Fire every callback due at or before ``now_ms``; returns how many ran."""
        if now_ms > self.now_ms:
            self.now_ms = now_ms
        fired = 0
        while self._heap and self._heap[0][0] <= self.now_ms:
            _, _, handle = heapq.heappop(self._heap)
            if not handle.pending:
                continue
            callback = handle.callback
            handle.fired = True
            handle.callback = None
            if callback is not None:
                callback()
                fired += 1
        return fired

    def cancel_all(self) -> None:
        for _, _, handle in self._heap:
            handle.cancel()
        if self._heap:
            logger.debug("[TIMER] Cancelled %d pending timers", len(self._heap))
        self._heap.clear()

    def pending_count(self) -> int:
        return sum(1 for _, _, handle in self._heap if handle.pending)
