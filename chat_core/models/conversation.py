"""Conversation-related data models."""

from dataclasses import dataclass, field
from datetime import datetime

from .messages import Message

TITLE_MAX_LENGTH = 50
DEFAULT_TITLE = "New Conversation"


def derive_title(messages: list[Message]) -> str:
    """Title is the leading text of the first message."""
    if not messages:
        return DEFAULT_TITLE
    text = messages[0].content.strip()
    if not text:
        return DEFAULT_TITLE
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_MAX_LENGTH] + "..."
    return text


@dataclass
class Conversation:
    """A chronological line of messages owned by one user."""

    id: str
    user_id: str
    title: str
    created_at: datetime
    updated_at: datetime
    messages: list[Message] = field(default_factory=list)

    def summary(self) -> "ConversationSummary":
        return ConversationSummary(
            id=self.id,
            title=self.title,
            message_count=len(self.messages),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class ConversationSummary:
    """Sidebar entry for a conversation, without its messages."""

    id: str
    title: str
    message_count: int
    created_at: datetime
    updated_at: datetime
