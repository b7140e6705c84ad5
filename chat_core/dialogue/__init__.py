"""Dialogue module."""

from .agent import DialogueAgent, IDialogueAgent, build_system_message
from .fallback import fallback_reply

__all__ = ["DialogueAgent", "IDialogueAgent", "build_system_message", "fallback_reply"]
