"""Scheduled team conversations paced by a simulated reading speed.

A team starts talking once every member is at their desk. Each scripted line
becomes eligible when the reading clock (characters readable since the round
started) reaches the line's cumulative offset, and long lines are shown in
fixed-size chunks, each on screen for a duration proportional to its length.
When the script runs out the team rests for a random cooldown and tries again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
from typing import Any, Callable, Iterable, Mapping, Protocol

from pydantic import ValidationError

from officeville.sim.config import MIN_CHUNK_MS, MS_PER_CHAR, SimConfig
from officeville.sim.contracts import DialogueEntry, Event
from officeville.sim.roster import LifecycleState, Roster
from officeville.sim.timers import TimerHandle, TimerQueue

logger = logging.getLogger("officeville.sim.conversation")


class SpeechSink(Protocol):
    def show_bubble(self, agent_id: str, text: str, duration_ms: float) -> None: ...


@dataclass(frozen=True)
class ScriptLine:
    speaker_id: str
    text: str
    token_count: int | None
    cumulative_offset: int


@dataclass
class ConversationState:
    group_id: str
    lines: list[ScriptLine]
    anchor_ms: float
    line_index: int = 0
    chunk_index: int = 0
    chunks: list[str] = field(default_factory=list)
    speaker_agent_id: str | None = None
    playing: bool = False
    is_active: bool = True
    timer: TimerHandle | None = None


def build_script(
    entries: Iterable[Mapping[str, Any] | DialogueEntry], *, group_id: str = "?"
) -> list[ScriptLine]:
    """Validate raw entries and precompute each line's cumulative offset."""
    lines: list[ScriptLine] = []
    offset = 0
    for index, raw in enumerate(entries):
        try:
            if isinstance(raw, DialogueEntry):
                entry = raw
            else:
                entry = DialogueEntry.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "[TALK] Skipping malformed line %d for team %s: %s",
                index,
                group_id,
                exc.errors()[0]["msg"],
            )
            continue
        lines.append(
            ScriptLine(
                speaker_id=entry.speaker_id,
                text=entry.text,
                token_count=entry.token_count,
                cumulative_offset=offset,
            )
        )
        offset += entry.weight
    return lines


def split_chunks(text: str, chunk_size: int) -> list[str]:
    if not text:
        return [""]
    return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]


def chunk_duration_ms(chunk: str) -> float:
    return max(MIN_CHUNK_MS, len(chunk) * MS_PER_CHAR)


class ConversationScheduler:
    def __init__(
        self,
        roster: Roster,
        scripts: Mapping[str, list[ScriptLine]],
        timers: TimerQueue,
        speech: SpeechSink,
        *,
        config: SimConfig | None = None,
        rng: random.Random | None = None,
        emit: Callable[[Event], None] | None = None,
    ) -> None:
        self._roster = roster
        self._scripts = dict(scripts)
        self._timers = timers
        self._speech = speech
        self._config = config or SimConfig()
        self._rng = rng or random.Random()
        self._emit = emit
        self._states: dict[str, ConversationState] = {}
        self._cooldowns: dict[str, TimerHandle] = {}
        self._destroyed = False

    def is_active(self, group_id: str) -> bool:
        return group_id in self._states

    def state(self, group_id: str) -> ConversationState | None:
        return self._states.get(group_id)

    def active_groups(self) -> list[str]:
        return list(self._states)

    def has_pending_cooldown(self, group_id: str) -> bool:
        handle = self._cooldowns.get(group_id)
        return handle is not None and handle.pending

    def try_start(self, group_id: str, now_ms: float | None = None) -> bool:
        """Begin a round if the whole team is working and none is running."""
        if self._destroyed or group_id in self._states:
            return False
        members = self._roster.members(group_id)
        if not members:
            return False
        if any(member.lifecycle_state != LifecycleState.WORKING for member in members):
            return False
        lines = self._scripts.get(group_id)
        if not lines:
            logger.debug("[TALK] Team %s has no script", group_id)
            return False

        cooldown = self._cooldowns.pop(group_id, None)
        if cooldown is not None:
            cooldown.cancel()
        now = self._timers.now_ms if now_ms is None else now_ms
        state = ConversationState(group_id=group_id, lines=lines, anchor_ms=now)
        self._states[group_id] = state
        logger.info("[TALK] Team %s is all here, starting a round", group_id)
        self._publish("ROUND_STARTED", group_id=group_id)
        self._advance(state, now)
        return True

    def tick(self, now_ms: float) -> None:
        if self._destroyed:
            return
        for state in list(self._states.values()):
            self._advance(state, now_ms)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        for state in self._states.values():
            state.is_active = False
            if state.timer is not None:
                state.timer.cancel()
        for handle in self._cooldowns.values():
            handle.cancel()
        self._states.clear()
        self._cooldowns.clear()

    def _advance(self, state: ConversationState, now_ms: float) -> None:
        while state.is_active and not state.playing:
            if state.line_index >= len(state.lines):
                self._finish(state)
                return
            line = state.lines[state.line_index]
            elapsed_seconds = (now_ms - state.anchor_ms) / 1000
            readable_chars = elapsed_seconds * self._config.chars_per_second
            if readable_chars < line.cumulative_offset:
                return
            speaker = self._roster.find_member(state.group_id, line.speaker_id)
            if speaker is None or speaker.lifecycle_state != LifecycleState.WORKING:
                logger.info(
                    "[TALK] Speaker %s of team %s is away, skipping line %d",
                    line.speaker_id,
                    state.group_id,
                    state.line_index,
                )
                state.line_index += 1
                continue
            state.speaker_agent_id = speaker.agent_id
            state.chunks = split_chunks(line.text, self._config.chunk_size)
            state.chunk_index = 0
            self._show_chunk(state)

    def _show_chunk(self, state: ConversationState) -> None:
        chunk = state.chunks[state.chunk_index]
        duration = chunk_duration_ms(chunk)
        line = state.lines[state.line_index]
        agent_id = state.speaker_agent_id or line.speaker_id
        self._speech.show_bubble(agent_id, chunk, duration)
        self._publish(
            "LINE",
            group_id=state.group_id,
            speaker_id=line.speaker_id,
            agent_id=agent_id,
            text=chunk,
            duration_ms=duration,
            line_index=state.line_index,
            chunk_index=state.chunk_index,
        )
        state.playing = True
        group_id = state.group_id
        state.timer = self._timers.call_later(
            duration, lambda: self._on_chunk_done(group_id)
        )

    def _on_chunk_done(self, group_id: str) -> None:
        state = self._states.get(group_id)
        if state is None or not state.is_active:
            return
        state.timer = None
        state.chunk_index += 1
        if state.chunk_index < len(state.chunks):
            self._show_chunk(state)
            return
        state.playing = False
        state.chunk_index = 0
        state.chunks = []
        state.line_index += 1
        self._advance(state, self._timers.now_ms)

    def _finish(self, state: ConversationState) -> None:
        state.is_active = False
        self._states.pop(state.group_id, None)
        group_id = state.group_id
        low, high = self._config.cooldown_ms
        delay = self._rng.randint(low, high)
        self._cooldowns[group_id] = self._timers.call_later(
            delay, lambda: self._on_cooldown(group_id)
        )
        logger.info(
            "[TALK] Team %s finished its round, next attempt in %d ms", group_id, delay
        )
        self._publish("ROUND_COMPLETE", group_id=group_id, cooldown_ms=delay)

    def _on_cooldown(self, group_id: str) -> None:
        self._cooldowns.pop(group_id, None)
        self.try_start(group_id)

    def _publish(self, kind: str, **payload: Any) -> None:
        if self._emit is not None:
            self._emit(Event(kind=kind, payload=payload))
