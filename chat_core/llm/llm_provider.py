"""LLM Provider implementation using Anthropic Claude API."""

import os
from typing import AsyncIterator, Protocol

import anthropic

from ..config import DEFAULT_MODEL


class ILLMProvider(Protocol):
    """Abstraction for streaming chat completions."""

    def stream(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> AsyncIterator[str]:
        """Yield reply text chunks as the model produces them."""
        ...


class LLMProvider:
    """Anthropic Claude API provider."""

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._model = model
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    @property
    def model(self) -> str:
        return self._model

    async def stream(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> AsyncIterator[str]:
        """Stream a completion from the Messages API."""
        kwargs = {
            "model": self._model,
            "messages": merge_consecutive_roles(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        try:
            async with self._client.messages.stream(**kwargs) as response:
                async for text in response.text_stream:
                    if text:
                        yield text
        except anthropic.APIError as e:
            # Re-raise for handling by caller
            raise RuntimeError(f"LLM API error: {e}") from e

    async def close(self) -> None:
        await self._client.close()


def merge_consecutive_roles(messages: list[dict]) -> list[dict]:
    """The Messages API needs alternating turns starting with a user turn."""
    merged: list[dict] = []
    for message in messages:
        if merged and merged[-1]["role"] == message["role"]:
            merged[-1] = {
                "role": message["role"],
                "content": f"{merged[-1]['content']}\n\n{message['content']}",
            }
        else:
            merged.append({"role": message["role"], "content": message["content"]})
    while merged and merged[0]["role"] != "user":
        merged.pop(0)
    return merged
