"""Data models for the tutor conversation."""

from __future__ import annotations as _annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal, Tuple

from typing_extensions import TypedDict


class Author(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    id: str
    text: str
    author: Author
    created_at: datetime

    @property
    def is_user(self) -> bool:
        return self.author is Author.USER


@dataclass(frozen=True)
class ConversationSnapshot:
    """What observers see after every append and pending-flag change."""

    messages: Tuple[Message, ...]
    pending: bool


class ChatMessage(TypedDict):
    """Format of messages sent to the browser."""

    id: str
    role: Literal["user", "model"]
    timestamp: str
    content: str
