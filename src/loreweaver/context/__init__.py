"""Context window management for loreweaver.

This module provides:
- Token counting with tiktoken
- The model capability table and turn configuration
- Conversation fragments and their request assembly
- Summary compaction of fragments that outgrow their reservation
- ContextWindowManager, which runs a full conversation turn

Example:
    from loreweaver.context import ContextWindowManager, ConversationKey, TurnConfig
    from loreweaver.storage import InMemoryFragmentStore

    manager = ContextWindowManager(
        provider=provider,
        store=InMemoryFragmentStore(),
        config=TurnConfig(summary_percentage=0.1),
    )
    reply = await manager.weave(
        ConversationKey("guild", "channel"),
        system="You are a storyteller.",
        message="Begin the tale.",
        author="alice",
    )
"""

from .counter import (
    CharacterEstimateCounter,
    MODEL_TOKENIZER_MAP,
    TiktokenCounter,
    TokenCounter,
    TokenizerType,
    get_token_counter,
)
from .models import (
    DEFAULT_MODEL,
    MODEL_PROFILES,
    ModelProfile,
    Models,
    TurnConfig,
    check_context_override,
)
from .fragment import ConversationId, ConversationKey, Fragment
from .assembler import (
    RESPONSE_DIRECTIVE,
    SUMMARY_CONTEXT,
    SUMMARY_DIRECTIVE,
    TOKEN_WORD_RATIO,
    FragmentAssembler,
    words_for_tokens,
)
from .compactor import CompactionResult, SummaryCompactor
from .manager import ContextWindowManager, TurnResult

__all__ = [
    # Counter
    "CharacterEstimateCounter",
    "MODEL_TOKENIZER_MAP",
    "TiktokenCounter",
    "TokenCounter",
    "TokenizerType",
    "get_token_counter",
    # Models
    "DEFAULT_MODEL",
    "MODEL_PROFILES",
    "ModelProfile",
    "Models",
    "TurnConfig",
    "check_context_override",
    # Fragments
    "ConversationId",
    "ConversationKey",
    "Fragment",
    # Assembly
    "FragmentAssembler",
    "RESPONSE_DIRECTIVE",
    "SUMMARY_CONTEXT",
    "SUMMARY_DIRECTIVE",
    "TOKEN_WORD_RATIO",
    "words_for_tokens",
    # Compaction
    "CompactionResult",
    "SummaryCompactor",
    # Manager
    "ContextWindowManager",
    "TurnResult",
]
