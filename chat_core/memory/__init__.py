"""Long-term memory module."""

from .client import IMemoryClient, MemoryClient, parse_memories

__all__ = ["IMemoryClient", "MemoryClient", "parse_memories"]
