"""Approximate token accounting for model input."""

import math

from ..models import Message

CHARS_PER_TOKEN = 4
DEFAULT_MESSAGE_OVERHEAD = 100


def estimate_tokens(message: Message, overhead: int = DEFAULT_MESSAGE_OVERHEAD) -> int:
    """Approximate cost of one message: a quarter token per char plus overhead."""
    return math.ceil(len(message.render()) / CHARS_PER_TOKEN) + overhead


def estimate_total(messages: list[Message], overhead: int = DEFAULT_MESSAGE_OVERHEAD) -> int:
    """Sum of estimate_tokens over a message list."""
    return sum(estimate_tokens(message, overhead) for message in messages)
