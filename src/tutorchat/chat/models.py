"""Chat message and turn value types."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class Role(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatMessage:
        return cls(role=Role(data["role"]), content=str(data.get("content", "")))


@dataclass(frozen=True)
class Turn:
    """One submission through to stream completion or failure.

    ``generation`` is the accumulator's context generation at submission
    time; writes from a turn of an older generation are discarded.
    """

    id: int
    generation: int

    @property
    def label(self) -> str:
        return f"{self.generation}.{self.id}"
