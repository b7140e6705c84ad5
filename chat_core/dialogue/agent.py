"""DialogueAgent implementation."""

import uuid
from datetime import datetime, timezone
from typing import AsyncIterator, Protocol

from ..context import ContextManager, split_system
from ..errors import ServiceError, ValidationError
from ..llm import ILLMProvider
from ..logging_config import get_logger
from ..memory import IMemoryClient
from ..models import Memory, Message
from .fallback import fallback_reply

logger = get_logger(__name__)

BASE_PROMPT = "You are a helpful AI assistant."
NO_MEMORY_CONTEXT = "No previous context available."


class IDialogueAgent(Protocol):
    """Produces assistant replies for a conversation transcript."""

    async def respond(self, user_id: str, messages: list[Message]) -> AsyncIterator[str]:
        """Return a stream of reply text. Never fails once validation passes."""
        ...


def build_system_message(memories: list[Memory]) -> Message:
    """System prompt carrying whatever the memory service recalled."""
    if memories:
        recalled = "\n".join(memory.text for memory in memories)
        memory_context = (
            f"Here's some relevant context from previous conversations: {recalled}"
        )
    else:
        memory_context = NO_MEMORY_CONTEXT

    return Message(
        id=str(uuid.uuid4()),
        role="system",
        content=f"{BASE_PROMPT} {memory_context}",
        timestamp=datetime.now(timezone.utc),
    )


async def _single(text: str) -> AsyncIterator[str]:
    yield text


class DialogueAgent:
    """Memory-augmented, context-trimmed chat replies with a canned fallback."""

    def __init__(
        self,
        llm_provider: ILLMProvider | None,
        memory: IMemoryClient,
        context_manager: ContextManager,
    ):
        self._llm = llm_provider
        self._memory = memory
        self._context = context_manager

    async def respond(self, user_id: str, messages: list[Message]) -> AsyncIterator[str]:
        """Validate, build the model context and open the reply stream."""
        if not user_id:
            raise ValidationError("User ID is required")
        if not messages:
            raise ValidationError("Messages array is required and cannot be empty")

        latest = next(
            (message for message in reversed(messages) if message.role == "user"),
            messages[-1],
        )
        logger.info(
            f"Chat request from {user_id}: {latest.content[:100]}",
            extra={"context": {"user_id": user_id, "message_count": len(messages)}},
        )

        memories = await self._recall(user_id, latest.content)
        _, turns = split_system(messages)
        context = self._context.trim([build_system_message(memories), *turns])
        system, turns = split_system(context)

        if self._llm is None:
            logger.warning("LLM provider not configured, using fallback reply")
            return _single(fallback_reply(latest.content))

        stream = self._llm.stream(
            messages=[{"role": m.role, "content": m.render()} for m in turns],
            system=system.content if system else None,
        )

        # Pull the first chunk so provider failures still allow a fallback reply
        try:
            first = await anext(stream)
        except StopAsyncIteration:
            first = ""
        except Exception as e:
            logger.error(f"LLM error for {user_id}: {e}", exc_info=True)
            return _single(fallback_reply(latest.content))

        await self._remember(user_id, latest.content)
        return self._relay(user_id, first, stream)

    async def _recall(self, user_id: str, query: str) -> list[Memory]:
        try:
            return await self._memory.search_memories(user_id, query)
        except ServiceError as e:
            logger.error(f"Memory service error: {e.message}")
            return []

    async def _remember(self, user_id: str, text: str) -> None:
        try:
            await self._memory.add_memory(user_id, text)
        except ServiceError as e:
            logger.warning(f"Memory save failed (continuing anyway): {e.message}")

    async def _relay(
        self, user_id: str, first: str, stream: AsyncIterator[str]
    ) -> AsyncIterator[str]:
        if first:
            yield first
        try:
            async for chunk in stream:
                yield chunk
        except Exception as e:
            # Headers are already sent; end the reply early
            logger.error(f"LLM stream interrupted for {user_id}: {e}", exc_info=True)
