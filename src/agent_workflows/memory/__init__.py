"""Conversation memory."""

from .messages import Message, Role, to_chat_messages
from .session import ConversationSession
from .stores import BaseMemory, ReadOnlyMemory, TokenMemory, UnconstrainedMemory

__all__ = [
    "BaseMemory",
    "ConversationSession",
    "Message",
    "ReadOnlyMemory",
    "Role",
    "TokenMemory",
    "UnconstrainedMemory",
    "to_chat_messages",
]
