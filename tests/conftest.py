"""Common test fixtures and configuration for loreweaver tests."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

import pytest
import structlog

from loreweaver.context import ContextWindowManager, ConversationKey, Fragment, TurnConfig
from loreweaver.llm.base import Message, MessageRole, SamplingParams
from loreweaver.storage import InMemoryFragmentStore


# ============================================================================
# Fakes
# ============================================================================


class WordCounter:
    """Deterministic token counter: one token per whitespace separated word.

    ``overrides`` pins the count for exact strings.
    """

    def __init__(self, overrides: Optional[Dict[str, int]] = None):
        self.overrides = overrides or {}

    def count(self, text: str) -> int:
        if text in self.overrides:
            return self.overrides[text]
        return len(text.split())


class ScriptedProvider:
    """Completion provider returning scripted responses in order.

    A scripted item that is an exception is raised instead of returned.
    """

    name = "scripted"

    def __init__(self, responses: Optional[List[Union[str, Exception]]] = None):
        self.responses = list(responses or [])
        self.calls: List[Tuple[List[Dict[str, str]], int, SamplingParams]] = []

    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        sampling: SamplingParams,
    ) -> str:
        self.calls.append((messages, max_tokens, sampling))
        if not self.responses:
            return "Mock response"
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    @property
    def call_count(self) -> int:
        return len(self.calls)


def words(count: int, word: str = "lore") -> str:
    """Text of exactly ``count`` words."""
    return " ".join([word] * count)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep structlog configuration from leaking between tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def counter() -> WordCounter:
    return WordCounter(overrides={"hello": 2})


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def store() -> InMemoryFragmentStore:
    return InMemoryFragmentStore()


@pytest.fixture
def turn_config() -> TurnConfig:
    """GPT3 (4096 tokens) with a 10% reservation: 409 tokens per turn."""
    return TurnConfig()


@pytest.fixture
def conversation_id() -> ConversationKey:
    return ConversationKey("story", "42")


@pytest.fixture
def manager(
    provider: ScriptedProvider,
    store: InMemoryFragmentStore,
    turn_config: TurnConfig,
    counter: WordCounter,
) -> ContextWindowManager:
    return ContextWindowManager(
        provider=provider,
        store=store,
        config=turn_config,
        counter=counter,
    )


@pytest.fixture
def sample_messages() -> List[Message]:
    """A short user/assistant exchange."""
    return [
        Message(role=MessageRole.USER, content="I open the door", author="alice"),
        Message(role=MessageRole.ASSISTANT, content="A cold wind greets you", author="alice"),
    ]


@pytest.fixture
def sample_fragment(sample_messages: List[Message], counter: WordCounter) -> Fragment:
    fragment = Fragment()
    for message in sample_messages:
        fragment.append_counted(message, counter)
    return fragment
