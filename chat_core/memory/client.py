"""Client for the long-term memory service (mem0-compatible REST API)."""

from typing import Any, Protocol

import httpx

from ..config import DEFAULT_MEM0_BASE_URL
from ..errors import UpstreamError
from ..logging_config import get_logger
from ..models import Memory

logger = get_logger(__name__)


class IMemoryClient(Protocol):
    """Per-user long-term memory."""

    async def add_memory(self, user_id: str, text: str) -> None:
        """Store a user utterance."""
        ...

    async def get_memories(self, user_id: str) -> list[Memory]:
        """List everything remembered about a user."""
        ...

    async def search_memories(self, user_id: str, query: str) -> list[Memory]:
        """Find memories relevant to a query."""
        ...


class MemoryClient:
    """httpx-based memory service client. Without an API key every call is a no-op."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_MEM0_BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"), timeout=timeout
        )

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Token {self._api_key}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(
                method, path, headers=self._headers(), **kwargs
            )
            response.raise_for_status()
            return response.json() if response.content else None
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"Memory service error: {e}") from e

    async def add_memory(self, user_id: str, text: str) -> None:
        if not self.enabled:
            return
        await self._request(
            "POST",
            "/memories/",
            json={"user_id": user_id, "messages": [{"role": "user", "content": text}]},
        )
        logger.debug("Memory stored", extra={"context": {"user_id": user_id}})

    async def get_memories(self, user_id: str) -> list[Memory]:
        if not self.enabled:
            return []
        payload = await self._request("GET", "/memories/", params={"user_id": user_id})
        return parse_memories(payload)

    async def search_memories(self, user_id: str, query: str) -> list[Memory]:
        if not self.enabled:
            return []
        payload = await self._request(
            "POST", "/memories/search/", json={"user_id": user_id, "query": query}
        )
        return parse_memories(payload)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def parse_memories(payload: Any) -> list[Memory]:
    """Accept both a bare list and a {"results": [...]} envelope."""
    if isinstance(payload, dict):
        payload = payload.get("results", [])
    if not isinstance(payload, list):
        return []

    memories = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        text = item.get("memory") or item.get("text")
        if not text:
            continue
        memories.append(
            Memory(id=str(item.get("id", "")), text=text, score=item.get("score"))
        )
    return memories
