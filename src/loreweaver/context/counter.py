"""Token counting for context budgeting."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Protocol, runtime_checkable

import tiktoken


class TokenizerType(str, Enum):
    """tiktoken encodings used by the model table."""

    TIKTOKEN_P50K = "p50k_base"


# Model to tokenizer mapping
MODEL_TOKENIZER_MAP: Dict[str, TokenizerType] = {
    "gpt-4": TokenizerType.TIKTOKEN_P50K,
    "gpt-3.5-turbo": TokenizerType.TIKTOKEN_P50K,
    "default": TokenizerType.TIKTOKEN_P50K,
}


@runtime_checkable
class TokenCounter(Protocol):
    """Protocol for token counting implementations."""

    def count(self, text: str) -> int:
        """Count tokens in the given text."""
        ...


class TiktokenCounter:
    """Token counter using the tiktoken library."""

    def __init__(self, encoding_name: str = TokenizerType.TIKTOKEN_P50K.value):
        """Initialize tiktoken counter.

        Args:
            encoding_name: The tiktoken encoding to use.
        """
        self._encoding_name = encoding_name
        self._encoding: Any = None

    @property
    def encoding(self) -> Any:
        """Lazy load tiktoken encoding."""
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self._encoding_name)
        return self._encoding

    def count(self, text: str) -> int:
        """Count tokens in the given text, special tokens included."""
        return len(self.encoding.encode(text, disallowed_special=()))


class CharacterEstimateCounter:
    """Token counter using character estimation, no tokenizer download.

    Not selected by model; inject it into the manager explicitly.
    """

    def __init__(self, chars_per_token: float = 4.0):
        self._chars_per_token = chars_per_token

    def count(self, text: str) -> int:
        if not text:
            return 0
        return max(1, int(len(text) / self._chars_per_token))


def get_token_counter(model: str) -> TiktokenCounter:
    """Get the token counter for a model API name.

    Unknown names fall back to the default tokenizer.
    """
    tokenizer_type = MODEL_TOKENIZER_MAP.get(model, MODEL_TOKENIZER_MAP["default"])
    return TiktokenCounter(tokenizer_type.value)
