"""Player-initiated conversations with NPCs."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from officeville.llm.base import ChatClient, Persona
from officeville.sim.config import INTERACTION_DISTANCE
from officeville.sim.conversation import SpeechSink
from officeville.sim.player import Player
from officeville.sim.roster import AgentRecord
from officeville.sim.timers import TimerHandle, TimerQueue
from officeville.sim.world_state import Sprite

logger = logging.getLogger("officeville.sim.interaction")

PLAYER_BUBBLE_MS = 2000
THINKING_BUBBLE_MS = 60000
BUSY_BUBBLE_MS = 3000
BUSY_END_MS = 3500
EMPTY_REPLY_MS = 2000
THINKING_TEXT = "..."
EMPTY_REPLY_TEXT = "Hmm..."
BUSY_TEXT = "Sorry, I'm a bit busy right now..."
THINK_END_TAG = "</think>"
NOT_READY_BUBBLE_MS = 3000
NOT_READY_TEXT = "The model is still loading, try again in a moment."


def find_interaction_target(
    player: Player,
    sprites: Iterable[Sprite],
    *,
    max_distance: float = INTERACTION_DISTANCE,
) -> Sprite | None:
    """Closest active sprite in reach on the side the player is facing."""
    best: Sprite | None = None
    best_distance = max_distance
    for sprite in sprites:
        if not sprite.active:
            continue
        distance = player.position.distance_to(sprite.position)
        if distance > max_distance:
            continue
        if player.facing_left and not sprite.position.x < player.position.x:
            continue
        if not player.facing_left and not sprite.position.x > player.position.x:
            continue
        if best is None or distance < best_distance:
            best = sprite
            best_distance = distance
    return best


def reply_duration_ms(text: str) -> float:
    return max(3000, len(text) * 80)


def player_bubble_ms(text: str) -> float:
    return max(PLAYER_BUBBLE_MS, len(text) * 80)


def visible_reply(snapshot: str) -> str:
    """Text worth showing from a streamed reply; reasoning before </think> is hidden."""
    head, tag, tail = snapshot.partition(THINK_END_TAG)
    if tag:
        return tail.strip()
    if "<think>" in head:
        return ""
    return head.strip()


class InteractionSession:
    """One player/NPC chat.

    Replies stream into the NPC's bubble. Once a reply is complete the session
    ends itself after the reply's reading time, through ``timers``. A failing
    chat backend is answered with a busy bubble and a short goodbye delay
    instead of an exception.
    """

    def __init__(
        self,
        record: AgentRecord,
        chat: ChatClient,
        speech: SpeechSink,
        *,
        player_id: str,
        timers: TimerQueue | None = None,
        on_finished: Callable[[], None] | None = None,
    ) -> None:
        self.record = record
        self.session_id = f"npc_{record.agent_id}"
        self._chat = chat
        self._speech = speech
        self._player_id = player_id
        self._timers = timers
        self._on_finished = on_finished
        self._end_handle: TimerHandle | None = None
        self._closed = False
        chat.open_session(
            self.session_id,
            Persona(name=record.role or "Colleague", description=record.introduction),
        )
        logger.info("[CHAT] Opened session %s", self.session_id)

    @property
    def agent_id(self) -> str:
        return self.record.agent_id

    @property
    def closed(self) -> bool:
        return self._closed

    def say(self, text: str) -> str:
        """Send the player's line and return the NPC's visible reply."""
        if self._closed:
            return ""
        message = text.strip()
        if not message:
            return ""
        self._cancel_end()
        self._speech.show_bubble(self._player_id, message, player_bubble_ms(message))
        self._speech.show_bubble(self.agent_id, THINKING_TEXT, THINKING_BUBBLE_MS)

        reply = ""
        try:
            for snapshot in self._chat.send(self.session_id, message):
                reply = visible_reply(snapshot)
                self._speech.show_bubble(
                    self.agent_id, reply or THINKING_TEXT, THINKING_BUBBLE_MS
                )
        except (RuntimeError, LookupError, OSError) as exc:
            logger.warning("[CHAT] Session %s failed: %s", self.session_id, exc)
            self._speech.show_bubble(self.agent_id, BUSY_TEXT, BUSY_BUBBLE_MS)
            self._schedule_end(BUSY_END_MS)
            return ""

        if reply:
            self._speech.show_bubble(self.agent_id, reply, reply_duration_ms(reply))
        else:
            self._speech.show_bubble(self.agent_id, EMPTY_REPLY_TEXT, EMPTY_REPLY_MS)
        self._schedule_end(reply_duration_ms(reply))
        return reply

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._cancel_end()
        self._chat.close_session(self.session_id)
        logger.info("[CHAT] Closed session %s", self.session_id)

    def _schedule_end(self, delay_ms: float) -> None:
        if self._timers is None:
            return
        self._end_handle = self._timers.call_later(delay_ms, self._finish)

    def _cancel_end(self) -> None:
        if self._end_handle is not None:
            self._end_handle.cancel()
            self._end_handle = None

    def _finish(self) -> None:
        self._end_handle = None
        if self._on_finished is not None:
            self._on_finished()
        else:
            self.close()
