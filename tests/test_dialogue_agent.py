"""Tests for DialogueAgent."""

import random
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from chat_core.context import ContextManager
from chat_core.dialogue import DialogueAgent, build_system_message, fallback_reply
from chat_core.dialogue.fallback import FALLBACK_RESPONSES, TOPIC_NOTES, UNAVAILABLE_NOTE
from chat_core.errors import UpstreamError, ValidationError
from chat_core.models import Attachment, Memory, Message

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_messages(*contents: str) -> list[Message]:
    return [
        Message(
            id=f"m{i}",
            role="user" if i % 2 == 0 else "assistant",
            content=content,
            timestamp=BASE_TIME + timedelta(seconds=i),
        )
        for i, content in enumerate(contents)
    ]


async def collect(stream) -> str:
    return "".join([chunk async for chunk in stream])


@pytest.fixture
def dialogue_agent(fake_llm, mock_memory):
    return DialogueAgent(
        llm_provider=fake_llm, memory=mock_memory, context_manager=ContextManager()
    )


class TestDialogueAgentRespond:
    """Tests for DialogueAgent.respond()."""

    async def test_streams_provider_reply(self, dialogue_agent):
        """Test that the provider's chunks are relayed in order."""
        stream = await dialogue_agent.respond("user1", make_messages("Hello"))
        assert await collect(stream) == "Hello there!"

    async def test_system_prompt_without_memories(self, dialogue_agent, fake_llm):
        await collect(await dialogue_agent.respond("user1", make_messages("Hello")))

        system = fake_llm.calls[0]["system"]
        assert system.startswith("You are a helpful AI assistant.")
        assert "No previous context available." in system

    async def test_recalled_memories_in_system_prompt(
        self, dialogue_agent, fake_llm, mock_memory
    ):
        mock_memory.search_memories.return_value = [
            Memory(id="1", text="Prefers TypeScript")
        ]

        await collect(await dialogue_agent.respond("user1", make_messages("Hello")))

        mock_memory.search_memories.assert_awaited_once_with("user1", "Hello")
        assert "Prefers TypeScript" in fake_llm.calls[0]["system"]

    async def test_latest_user_message_is_remembered(
        self, dialogue_agent, mock_memory
    ):
        messages = make_messages("first", "reply", "second")

        await collect(await dialogue_agent.respond("user1", messages))

        mock_memory.add_memory.assert_awaited_once_with("user1", "second")

    async def test_attachments_rendered_for_model(self, dialogue_agent, fake_llm):
        messages = make_messages("See this")
        messages[0].attachments = [
            Attachment(id="a", type="image", url="https://x/p.png", name="p.png")
        ]

        await collect(await dialogue_agent.respond("user1", messages))

        sent = fake_llm.calls[0]["messages"]
        assert sent == [
            {"role": "user", "content": "See this\n\n[Image: p.png](https://x/p.png)"}
        ]

    async def test_context_is_trimmed(self, fake_llm, mock_memory):
        agent = DialogueAgent(
            llm_provider=fake_llm,
            memory=mock_memory,
            context_manager=ContextManager(max_tokens=400),
        )
        messages = make_messages("a" * 400, "b" * 400, "c" * 40)

        await collect(await agent.respond("user1", messages))

        sent = fake_llm.calls[0]["messages"]
        assert [m["content"] for m in sent] == ["c" * 40]

    async def test_memory_failure_does_not_block_reply(
        self, dialogue_agent, mock_memory
    ):
        mock_memory.search_memories = AsyncMock(side_effect=UpstreamError("down"))
        mock_memory.add_memory = AsyncMock(side_effect=UpstreamError("down"))

        stream = await dialogue_agent.respond("user1", make_messages("Hello"))

        assert await collect(stream) == "Hello there!"


class TestDialogueAgentFallback:
    """Tests for the canned reply path."""

    async def test_provider_error_falls_back(self, dialogue_agent, fake_llm):
        fake_llm.error = RuntimeError("LLM API error: overloaded")

        reply = await collect(
            await dialogue_agent.respond("user1", make_messages("Tell me about React"))
        )

        assert reply.endswith(UNAVAILABLE_NOTE)
        assert TOPIC_NOTES["react"] in reply

    async def test_no_provider_falls_back(self, mock_memory):
        agent = DialogueAgent(
            llm_provider=None, memory=mock_memory, context_manager=ContextManager()
        )

        reply = await collect(await agent.respond("user1", make_messages("Hello")))

        assert any(reply.startswith(r) for r in FALLBACK_RESPONSES)
        mock_memory.add_memory.assert_not_awaited()

    async def test_mid_stream_failure_ends_reply(self, mock_memory):
        class BreakingLLM:
            async def stream(self, messages, system=None, **kwargs):
                yield "partial"
                raise RuntimeError("connection reset")

        agent = DialogueAgent(
            llm_provider=BreakingLLM(),
            memory=mock_memory,
            context_manager=ContextManager(),
        )

        reply = await collect(await agent.respond("user1", make_messages("Hello")))

        assert reply == "partial"


class TestDialogueAgentValidation:
    async def test_user_id_required(self, dialogue_agent):
        with pytest.raises(ValidationError, match="User ID is required"):
            await dialogue_agent.respond("", make_messages("Hello"))

    async def test_messages_required(self, dialogue_agent):
        with pytest.raises(ValidationError, match="Messages array is required"):
            await dialogue_agent.respond("user1", [])


class TestHelpers:
    def test_build_system_message(self):
        message = build_system_message(
            [Memory(id="1", text="Likes tea"), Memory(id="2", text="Lives in Oslo")]
        )
        assert message.role == "system"
        assert "Likes tea\nLives in Oslo" in message.content

    def test_fallback_reply_uses_first_matching_topic(self):
        reply = fallback_reply("How do I call an API from JavaScript?", random.Random(1))
        assert TOPIC_NOTES["javascript"] in reply
        assert TOPIC_NOTES["api"] not in reply
