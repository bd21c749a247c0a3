"""AI chat assistant: message shapes, history store and session state machine."""

from .messages import ChatMessage, ChatReply, ChatRequest
from .session import ChatSession, ChatSessionRegistry, ChatState
from .store import KeyValueStore, MemoryStore

__all__ = [
    "ChatMessage",
    "ChatReply",
    "ChatRequest",
    "ChatSession",
    "ChatSessionRegistry",
    "ChatState",
    "KeyValueStore",
    "MemoryStore",
]
