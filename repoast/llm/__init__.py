"""Completion service adapters."""

from .runner import CompletionRequest, LLMRunner

__all__ = ["CompletionRequest", "LLMRunner"]
