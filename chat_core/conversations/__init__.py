"""Conversations module."""

from .service import ConversationService, IConversationService, check_chronological

__all__ = ["ConversationService", "IConversationService", "check_chronological"]
