"""Core data models for the chat service."""

from .conversation import Conversation, ConversationSummary, derive_title
from .memory import Memory
from .messages import Attachment, Message, attachment_type_for
from .users import PublicUser, User

__all__ = [
    # Messages
    "Message",
    "Attachment",
    "attachment_type_for",
    # Conversations
    "Conversation",
    "ConversationSummary",
    "derive_title",
    # Users
    "User",
    "PublicUser",
    # Memory
    "Memory",
]
