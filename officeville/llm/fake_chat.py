"""Deterministic chat client for tests and demos."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from officeville.llm.base import ChatClient, Persona, UnknownSessionError


@dataclass
class ChatSession:
    session_id: str
    persona: Persona
    messages: list[dict[str, str]] = field(default_factory=list)


class FakeChatClient(ChatClient):
    def __init__(self, *, ready: bool = True) -> None:
        self._ready = ready
        self._sessions: dict[str, ChatSession] = {}

    @property
    def is_ready(self) -> bool:
        return self._ready

    def session(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    def open_session(self, session_id: str, persona: Persona) -> None:
        self._sessions[session_id] = ChatSession(
            session_id=session_id,
            persona=persona,
            messages=[{"role": "system", "content": persona.system_prompt()}],
        )

    def send(self, session_id: str, message: str) -> Iterator[str]:
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        session.messages.append({"role": "user", "content": message})
        reply = f"{session.persona.name} here. You said: {message.strip()}"
        words = reply.split(" ")
        for index in range(1, len(words) + 1):
            yield " ".join(words[:index])
        session.messages.append({"role": "assistant", "content": reply})

    def close_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
