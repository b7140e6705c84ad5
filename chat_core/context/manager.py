"""Token-budget-aware selection of conversation messages."""

from ..logging_config import get_logger
from ..models import Message
from .tokens import DEFAULT_MESSAGE_OVERHEAD, estimate_tokens, estimate_total

logger = get_logger(__name__)

DEFAULT_MAX_TOKENS = 8000
DEFAULT_OVERLAP = 2


def split_system(messages: list[Message]) -> tuple[Message | None, list[Message]]:
    """Separate the first system message from the conversation turns."""
    system: Message | None = None
    turns: list[Message] = []
    for message in messages:
        if message.role == "system" and system is None:
            system = message
        elif message.role != "system":
            turns.append(message)
    return system, turns


class ContextManager:
    """Fits conversations into the model's context window."""

    def __init__(
        self,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        message_overhead: int = DEFAULT_MESSAGE_OVERHEAD,
    ):
        self._max_tokens = max_tokens
        self._overhead = message_overhead

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    def estimate(self, message: Message) -> int:
        """Token cost of a single message."""
        return estimate_tokens(message, self._overhead)

    def trim(self, messages: list[Message], budget: int | None = None) -> list[Message]:
        """
        Keep the most recent messages that fit in the budget.

        The system message (if any) is always first and its cost is reserved
        before any turn is considered. Turns are taken newest to oldest; the
        first one that does not fit ends the scan. Output keeps chronological
        order.
        """
        budget = self._max_tokens if budget is None else budget
        system, turns = split_system(messages)

        total = self.estimate(system) if system else 0
        kept: list[Message] = []
        for message in reversed(turns):
            cost = self.estimate(message)
            if total + cost > budget:
                break
            kept.append(message)
            total += cost
        kept.reverse()

        logger.debug(
            "Trimmed context",
            extra={
                "context": {
                    "input_messages": len(messages),
                    "kept_turns": len(kept),
                    "estimated_tokens": total,
                    "budget": budget,
                }
            },
        )

        return ([system] if system else []) + kept

    def segment(
        self,
        messages: list[Message],
        budget: int | None = None,
        overlap: int = DEFAULT_OVERLAP,
    ) -> list[list[Message]]:
        """
        Split a conversation into budget-sized windows.

        Each window starts with the system message (if any). A new window is
        seeded with the last `overlap` turns of the previous one.
        """
        if overlap < 0:
            raise ValueError("overlap must be >= 0")

        budget = self._max_tokens if budget is None else budget
        system, turns = split_system(messages)
        system_cost = self.estimate(system) if system else 0
        prefix = [system] if system else []

        segments: list[list[Message]] = []
        current: list[Message] = []
        current_cost = 0

        for message in turns:
            cost = self.estimate(message)
            if current and current_cost + cost + system_cost > budget:
                segments.append(prefix + current)
                current = current[-overlap:] if overlap else []
                current_cost = estimate_total(current, self._overhead)
            current.append(message)
            current_cost += cost

        if current:
            segments.append(prefix + current)

        return segments
