"""Chat domain models for the storyboard assistant."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Literal
from uuid import uuid4

ChatRole = Literal["user", "assistant"]


def new_message_id(role: str) -> str:
    """Return a unique message id prefixed with the author role."""
    return f"{role}-{uuid4().hex}"


@dataclass(frozen=True)
class ChatMessage:
    """One entry of the append-only assistant transcript."""

    id: str
    role: ChatRole
    content: str
    created_at: float = field(default_factory=lambda: time.time())

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "role": self.role, "content": self.content}
