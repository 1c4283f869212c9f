from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """A single chat message."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role="system", text=text)

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role="user", text=text)

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role="assistant", text=text)

    def to_chat(self) -> dict[str, str]:
        """The `{"role", "content"}` shape chat providers accept."""

        return {"role": self.role, "content": self.text}


def to_chat_messages(messages: list[Message]) -> list[dict[str, str]]:
    return [m.to_chat() for m in messages]
