"""Tests for LLMProvider."""

from unittest.mock import AsyncMock, Mock, patch

import anthropic
import httpx
import pytest

from chat_core.llm import LLMProvider, merge_consecutive_roles


class FakeMessageStream:
    """Stands in for the SDK's MessageStream context manager."""

    def __init__(self, chunks=(), error: Exception | None = None):
        self._chunks = list(chunks)
        self._error = error

    async def __aenter__(self):
        if self._error:
            raise self._error
        return self

    async def __aexit__(self, *exc_info):
        return False

    @property
    def text_stream(self):
        async def gen():
            for chunk in self._chunks:
                yield chunk

        return gen()


def make_client(stream: FakeMessageStream) -> Mock:
    client = Mock()
    client.messages.stream = Mock(return_value=stream)
    client.close = AsyncMock()
    return client


class TestLLMProviderInit:
    """Tests for LLMProvider initialization."""

    def test_init_with_api_key(self, monkeypatch):
        """Test initialization with API key."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")

        with patch("chat_core.llm.llm_provider.anthropic.AsyncAnthropic"):
            provider = LLMProvider()
            assert provider is not None

    def test_init_with_explicit_key_and_model(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with patch("chat_core.llm.llm_provider.anthropic.AsyncAnthropic") as cls:
            provider = LLMProvider(api_key="explicit", model="claude-test")

        cls.assert_called_once_with(api_key="explicit")
        assert provider.model == "claude-test"

    def test_init_without_api_key(self, monkeypatch):
        """Test initialization without API key raises error."""
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with patch("chat_core.llm.llm_provider.anthropic.AsyncAnthropic"):
            with pytest.raises(ValueError):
                LLMProvider()


class TestLLMProviderStream:
    """Tests for LLMProvider.stream() method."""

    @pytest.mark.asyncio
    async def test_stream_yields_text_chunks(self, monkeypatch):
        """Test that stream() yields the SDK's text deltas."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
        mock_client = make_client(FakeMessageStream(["Hel", "", "lo"]))

        with patch(
            "chat_core.llm.llm_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = LLMProvider()
            chunks = [
                c async for c in provider.stream([{"role": "user", "content": "Hi"}])
            ]

        # Empty deltas are skipped
        assert chunks == ["Hel", "lo"]

    @pytest.mark.asyncio
    async def test_stream_sends_correct_format(self, monkeypatch):
        """Test that stream() sends correct format to API."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
        mock_client = make_client(FakeMessageStream(["ok"]))

        with patch(
            "chat_core.llm.llm_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = LLMProvider(model="claude-test")
            async for _ in provider.stream(
                messages=[
                    {"role": "user", "content": "Hello"},
                    {"role": "assistant", "content": "Hi"},
                    {"role": "user", "content": "How are you?"},
                ],
                system="You are helpful",
                max_tokens=512,
            ):
                pass

        mock_client.messages.stream.assert_called_once()
        kwargs = mock_client.messages.stream.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["system"] == "You are helpful"
        assert kwargs["max_tokens"] == 512
        assert len(kwargs["messages"]) == 3

    @pytest.mark.asyncio
    async def test_stream_omits_empty_system(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
        mock_client = make_client(FakeMessageStream(["ok"]))

        with patch(
            "chat_core.llm.llm_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = LLMProvider()
            async for _ in provider.stream([{"role": "user", "content": "Hi"}]):
                pass

        assert "system" not in mock_client.messages.stream.call_args.kwargs

    @pytest.mark.asyncio
    async def test_api_error_is_wrapped(self, monkeypatch):
        """Test that SDK errors surface as RuntimeError."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
        error = anthropic.APIError(
            "overloaded",
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"),
            body=None,
        )
        mock_client = make_client(FakeMessageStream(error=error))

        with patch(
            "chat_core.llm.llm_provider.anthropic.AsyncAnthropic",
            return_value=mock_client,
        ):
            provider = LLMProvider()
            with pytest.raises(RuntimeError, match="LLM API error"):
                async for _ in provider.stream([{"role": "user", "content": "Hi"}]):
                    pass


class TestMergeConsecutiveRoles:
    """Tests for turn normalization."""

    def test_merges_same_role_neighbours(self):
        merged = merge_consecutive_roles(
            [
                {"role": "user", "content": "a"},
                {"role": "user", "content": "b"},
                {"role": "assistant", "content": "c"},
            ]
        )
        assert merged == [
            {"role": "user", "content": "a\n\nb"},
            {"role": "assistant", "content": "c"},
        ]

    def test_drops_leading_assistant_turns(self):
        merged = merge_consecutive_roles(
            [
                {"role": "assistant", "content": "hello"},
                {"role": "user", "content": "hi"},
            ]
        )
        assert merged == [{"role": "user", "content": "hi"}]

    def test_does_not_mutate_input(self):
        messages = [
            {"role": "user", "content": "a"},
            {"role": "user", "content": "b"},
        ]
        merge_consecutive_roles(messages)
        assert messages[0]["content"] == "a"
