"""Conversation protocol — message roles and the immutable message record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ─── Enums ────────────────────────────────────────────────────────────────────

class Role(Enum):
    USER = "user"
    ASSISTANT = "assistant"


# ─── Message ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_wire(self) -> dict[str, str]:
        """Encode as the ``{role, content}`` pair a chat-completions request carries."""
        return {"role": self.role.value, "content": self.content}

    def preview(self, width: int = 50) -> str:
        text = self.content.replace("\n", " ")
        return text if len(text) <= width else f"{text[:width]}..."
