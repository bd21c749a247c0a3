"""Chat message, request and reply shapes."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class ChatMessage:
    id: str
    role: str  # user/assistant
    content: str
    timestamp: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, role: str, content: str, **metadata: Any) -> "ChatMessage":
        return cls(
            id=f"{role}-{uuid.uuid4().hex[:12]}",
            role=role,
            content=content,
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata=metadata,
        )

    def to_turn(self) -> dict[str, str]:
        """Role/content pair as sent to the model."""
        return {"role": self.role, "content": self.content}

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        return cls(
            id=str(data.get("id", "")),
            role=str(data.get("role", "assistant")),
            content=str(data.get("content", "")),
            timestamp=str(data.get("timestamp", "")),
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class ChatRequest:
    message: str
    history: list[dict[str, str]] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)
    request_type: str = "chat"


@dataclass
class ChatReply:
    message: str
    workflow_data: dict[str, Any] | None = None
    action: str | None = None
    suggestions: list[str] = field(default_factory=list)
    error: str | None = None
