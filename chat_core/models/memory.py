"""Long-term memory models."""

from dataclasses import dataclass


@dataclass
class Memory:
    """A fact recalled from the memory service."""

    id: str
    text: str
    score: float | None = None
