"""Per-user conversation persistence."""

from datetime import datetime, timezone
from typing import Protocol

from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models import Conversation, ConversationSummary, Message, derive_title
from ..storage import IStorage

logger = get_logger(__name__)

DEFAULT_KEEP_COUNT = 50


class IConversationService(Protocol):
    """Owner-scoped access to conversations."""

    async def list_summaries(self, user_id: str, limit: int | None = None) -> list[ConversationSummary]:
        ...

    async def get(self, conversation_id: str, user_id: str) -> Conversation:
        ...

    async def save(
        self,
        conversation_id: str,
        user_id: str,
        messages: list[Message],
        title: str | None = None,
        created_at: datetime | None = None,
    ) -> Conversation:
        ...

    async def update(
        self,
        conversation_id: str,
        user_id: str,
        title: str | None = None,
        messages: list[Message] | None = None,
    ) -> Conversation:
        ...

    async def delete(self, conversation_id: str, user_id: str) -> None:
        ...


def check_chronological(messages: list[Message]) -> None:
    """Messages must be in non-decreasing timestamp order."""
    for previous, current in zip(messages, messages[1:]):
        if current.timestamp < previous.timestamp:
            raise ValidationError("Messages must be in chronological order")


class ConversationService:
    """Conversation CRUD; every operation is scoped to the owning user."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def list_summaries(self, user_id: str, limit: int | None = None) -> list[ConversationSummary]:
        return await self._storage.list_conversations(user_id, limit=limit)

    async def count(self, user_id: str) -> int:
        return await self._storage.count_conversations(user_id)

    async def get(self, conversation_id: str, user_id: str) -> Conversation:
        conversation = await self._storage.get_conversation(conversation_id, user_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        return conversation

    async def save(
        self,
        conversation_id: str,
        user_id: str,
        messages: list[Message],
        title: str | None = None,
        created_at: datetime | None = None,
    ) -> Conversation:
        """Create the conversation or replace its transcript."""
        check_chronological(messages)

        owner = await self._storage.get_conversation_owner(conversation_id)
        if owner is not None and owner != user_id:
            # Do not reveal that another user's conversation exists
            raise NotFoundError("Conversation not found")

        now = datetime.now(timezone.utc)
        if created_at is None and owner is not None:
            existing = await self._storage.get_conversation(conversation_id, user_id)
            created_at = existing.created_at if existing else None

        conversation = Conversation(
            id=conversation_id,
            user_id=user_id,
            title=title or derive_title(messages),
            created_at=created_at or now,
            updated_at=now,
            messages=messages,
        )
        await self._storage.save_conversation(conversation)

        logger.info(
            "Conversation saved",
            extra={
                "context": {
                    "conversation_id": conversation_id,
                    "user_id": user_id,
                    "message_count": len(messages),
                }
            },
        )
        return conversation

    async def update(
        self,
        conversation_id: str,
        user_id: str,
        title: str | None = None,
        messages: list[Message] | None = None,
    ) -> Conversation:
        """Merge a partial update into an owned conversation."""
        conversation = await self.get(conversation_id, user_id)

        if messages is not None:
            check_chronological(messages)
            conversation.messages = messages
        if title is not None:
            conversation.title = title
        conversation.updated_at = datetime.now(timezone.utc)

        await self._storage.save_conversation(conversation)
        return conversation

    async def delete(self, conversation_id: str, user_id: str) -> None:
        if not await self._storage.delete_conversation(conversation_id, user_id):
            raise NotFoundError("Conversation not found")
        logger.info(
            "Conversation deleted",
            extra={"context": {"conversation_id": conversation_id, "user_id": user_id}},
        )

    async def cleanup(self, user_id: str, keep: int = DEFAULT_KEEP_COUNT) -> int:
        """Delete all but the `keep` most recently updated conversations."""
        if keep < 0:
            raise ValidationError("keep must be >= 0")
        deleted = await self._storage.delete_old_conversations(user_id, keep)
        if deleted:
            logger.info(
                f"Removed {deleted} old conversations",
                extra={"context": {"user_id": user_id}},
            )
        return deleted
