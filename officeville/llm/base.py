"""Chat client interface used for player/NPC conversations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Protocol


@dataclass(frozen=True)
class Persona:
    name: str
    description: str = ""

    def system_prompt(self) -> str:
        prompt = f"You are {self.name}, a colleague in a busy office."
        if self.description:
            prompt += f" {self.description}"
        return prompt + " Reply briefly and stay in character."


class UnknownSessionError(LookupError):
    """Raised when a message targets a session that was never opened."""


class ChatClient(Protocol):
    @property
    def is_ready(self) -> bool:
        """Whether the backing model can answer yet."""

    def open_session(self, session_id: str, persona: Persona) -> None:
        """Create (or reset) a conversation seeded with the persona."""

    def send(self, session_id: str, message: str) -> Iterator[str]:
        """Stream the reply as cumulative text snapshots."""

    def close_session(self, session_id: str) -> None:
        """Forget a conversation."""
