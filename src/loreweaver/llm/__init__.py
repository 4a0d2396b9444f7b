"""Completion provider abstraction layer."""

from .base import (
    CompletionProvider,
    LLMConfig,
    Message,
    MessageRole,
    SamplingParams,
)
from .providers import OpenAIProvider

__all__ = [
    # Base types
    "CompletionProvider",
    "LLMConfig",
    "Message",
    "MessageRole",
    "SamplingParams",
    # Providers
    "OpenAIProvider",
]
