"""Utility functions for building and converting chat messages."""

from __future__ import annotations as _annotations

import uuid
from datetime import datetime, timezone

from cellmate.models import Author, ChatMessage, Message


def create_message(text: str, author: Author) -> Message:
    """Create a Message with a fresh id and the current UTC timestamp."""
    return Message(
        id=uuid.uuid4().hex,
        text=text,
        author=author,
        created_at=datetime.now(tz=timezone.utc),
    )


def create_user_message(text: str) -> Message:
    return create_message(text, Author.USER)


def create_assistant_message(text: str) -> Message:
    return create_message(text, Author.ASSISTANT)


def to_chat_message(m: Message) -> ChatMessage:
    """Convert a Message to a ChatMessage for the frontend."""
    return {
        "id": m.id,
        "role": "user" if m.is_user else "model",
        "timestamp": m.created_at.isoformat(),
        "content": m.text,
    }
