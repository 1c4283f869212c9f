from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from .messages import Message
from .stores import BaseMemory, UnconstrainedMemory


@dataclass
class ConversationSession:
    """State owned by one console conversation.

    Holds the conversation memory and whatever the previous workflow turn
    produced. Callers running several sessions keep one of these each.
    """

    memory: BaseMemory = field(default_factory=UnconstrainedMemory)
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    last_result: dict[str, Any] = field(default_factory=dict)
    turns: int = 0

    def add_user_message(self, text: str) -> Message:
        message = Message.user(text)
        self.memory.add(message)
        return message

    def add_assistant_message(self, text: str) -> Message:
        message = Message.assistant(text)
        self.memory.add(message)
        return message

    def remember(self, result: dict[str, Any]) -> None:
        self.last_result = dict(result)
        self.turns += 1
