"""LLM module."""

from .llm_provider import ILLMProvider, LLMProvider, merge_consecutive_roles

__all__ = ["ILLMProvider", "LLMProvider", "merge_consecutive_roles"]
