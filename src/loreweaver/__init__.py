"""Loreweaver - context window management for long LLM conversations.

Keeps each conversation inside its model's context window by tracking
the tokens of the current fragment and, when the next turn would not
fit, replacing the fragment with a model-written summary.

Example:
    from loreweaver import ContextWindowManager, ConversationKey, TurnConfig
    from loreweaver.llm import LLMConfig, OpenAIProvider
    from loreweaver.storage import RedisFragmentStore

    manager = ContextWindowManager(
        provider=OpenAIProvider(LLMConfig(model="gpt-3.5-turbo")),
        store=RedisFragmentStore(),
        config=TurnConfig(),
    )
    reply = await manager.weave(
        ConversationKey("story", "42"),
        system="You narrate a fantasy adventure.",
        message="I open the door.",
        author="player-1",
    )
"""

__version__ = "0.1.0"

from .errors import (
    BadConfigError,
    BudgetExhaustedError,
    CompletionFailedError,
    InvalidRoleError,
    LoreweaverError,
    StorageFailedError,
)
from .llm import (
    CompletionProvider,
    LLMConfig,
    Message,
    MessageRole,
    SamplingParams,
)
from .context import (
    ContextWindowManager,
    ConversationId,
    ConversationKey,
    Fragment,
    FragmentAssembler,
    ModelProfile,
    Models,
    TurnConfig,
    TurnResult,
)
from .storage import FragmentStore

__all__ = [
    # Version
    "__version__",
    # Errors
    "BadConfigError",
    "BudgetExhaustedError",
    "CompletionFailedError",
    "InvalidRoleError",
    "LoreweaverError",
    "StorageFailedError",
    # LLM
    "CompletionProvider",
    "LLMConfig",
    "Message",
    "MessageRole",
    "SamplingParams",
    # Context
    "ContextWindowManager",
    "ConversationId",
    "ConversationKey",
    "Fragment",
    "FragmentAssembler",
    "ModelProfile",
    "Models",
    "TurnConfig",
    "TurnResult",
    # Storage
    "FragmentStore",
]
