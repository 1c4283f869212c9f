"""Conversation memory stores.

Memories are append-only during a session; `reset` is the only way to drop
history wholesale. TokenMemory additionally evicts the oldest messages to
stay within a token budget.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any

from agent_workflows.llm.provider import LLMProvider

from .messages import Message

logger = logging.getLogger(__name__)


class BaseMemory(ABC):
    @property
    @abstractmethod
    def messages(self) -> list[Message]: ...

    @abstractmethod
    def add(self, message: Message) -> None: ...

    @abstractmethod
    def reset(self) -> None: ...

    def add_many(self, messages: Iterable[Message]) -> None:
        for message in messages:
            self.add(message)

    def as_read_only(self) -> ReadOnlyMemory:
        return ReadOnlyMemory(self)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)


class UnconstrainedMemory(BaseMemory):
    """Keeps every message."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def add(self, message: Message) -> None:
        self._messages.append(message)

    def reset(self) -> None:
        self._messages.clear()


class TokenMemory(BaseMemory):
    """Keeps the most recent messages that fit in `max_tokens`.

    System messages are never evicted. The newest message is always kept even
    if it alone exceeds the budget.
    """

    def __init__(self, llm: LLMProvider, max_tokens: int = 4096) -> None:
        if max_tokens <= 0:
            raise ValueError("max_tokens must be a positive integer")
        self._llm = llm
        self.max_tokens = max_tokens
        self._messages: list[tuple[Message, int]] = []

    @property
    def messages(self) -> list[Message]:
        return [m for m, _ in self._messages]

    @property
    def tokens_used(self) -> int:
        return sum(n for _, n in self._messages)

    def add(self, message: Message) -> None:
        self._messages.append((message, self._llm.count_tokens(message.text)))
        self._evict()

    def reset(self) -> None:
        self._messages.clear()

    def _evict(self) -> None:
        while self.tokens_used > self.max_tokens:
            idx = next(
                (
                    i
                    for i, (m, _) in enumerate(self._messages[:-1])
                    if m.role != "system"
                ),
                None,
            )
            if idx is None:
                return
            evicted, tokens = self._messages.pop(idx)
            logger.debug(
                "Evicted message from token memory",
                extra={"role": evicted.role, "tokens": tokens, "max_tokens": self.max_tokens},
            )


class ReadOnlyMemory(BaseMemory):
    """A view over another memory that refuses writes."""

    def __init__(self, source: BaseMemory) -> None:
        self._source = source

    @property
    def messages(self) -> list[Message]:
        return self._source.messages

    def add(self, message: Message) -> None:
        raise TypeError("Memory is read-only")

    def reset(self) -> None:
        raise TypeError("Memory is read-only")

    def as_read_only(self) -> ReadOnlyMemory:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> ReadOnlyMemory:
        # Views are immutable; copies of workflow state share the source.
        return self
