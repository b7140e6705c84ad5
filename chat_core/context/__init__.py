"""Context window management."""

from .manager import ContextManager, split_system
from .tokens import estimate_tokens, estimate_total

__all__ = ["ContextManager", "split_system", "estimate_tokens", "estimate_total"]
