"""Chat client interfaces for player conversations."""

from officeville.llm.base import ChatClient, Persona, UnknownSessionError
from officeville.llm.fake_chat import FakeChatClient

__all__ = [
    "ChatClient",
    "FakeChatClient",
    "Persona",
    "UnknownSessionError",
]
