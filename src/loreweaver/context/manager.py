"""Context window management for long-running conversations.

Each call to ``weave`` is one conversation turn:

1. validate the context window override
2. load the conversation's current fragment
3. compute the token reservation for the turn
4. compact the fragment into a summary when it no longer fits
5. prompt the model with the fragment and the new user message
6. append the exchange and persist the fragment

A turn either completes fully or leaves storage untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from loreweaver.context.assembler import FragmentAssembler, words_for_tokens
from loreweaver.context.compactor import SummaryCompactor
from loreweaver.context.counter import TokenCounter, get_token_counter
from loreweaver.context.fragment import ConversationId, Fragment
from loreweaver.context.models import Models, TurnConfig, check_context_override
from loreweaver.errors import BudgetExhaustedError, LoreweaverError, StorageFailedError
from loreweaver.llm.base import (
    CompletionProvider,
    Message,
    MessageRole,
    complete_or_raise,
)
from loreweaver.observability.logging import conversation_context, get_logger

if TYPE_CHECKING:
    from loreweaver.storage.base import FragmentStore

logger = get_logger(__name__)


@dataclass
class TurnResult:
    """Outcome of a single completed turn."""

    response: str
    compacted: bool
    reservation: int
    max_output_tokens: int
    fragment: Fragment


class ContextWindowManager:
    """Runs conversation turns inside a model's context window.

    The provider, store and counter are injected and shared by every
    turn; the manager keeps no per-conversation state between turns.
    Turns for the same conversation are not serialized here.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        store: FragmentStore,
        config: Optional[TurnConfig] = None,
        counter: Optional[TokenCounter] = None,
        assembler: Optional[FragmentAssembler] = None,
    ):
        """Initialize context window manager.

        Args:
            provider: Completion provider used for summaries and replies.
            store: Fragment store for conversation state.
            config: Turn configuration; defaults to TurnConfig().
            counter: Token counter; defaults to the model's tokenizer.
            assembler: Request message assembler.
        """
        self.config = config or TurnConfig()
        self._provider = provider
        self._store = store
        self._counter = counter or get_token_counter(self.config.model.model_name)
        self._assembler = assembler or FragmentAssembler()
        self._compactor = SummaryCompactor(provider, self._counter, self._assembler)

    @property
    def model(self) -> Models:
        return self.config.model

    def tokens_available(self, override_window: Optional[int] = None) -> int:
        """Token reservation for a turn.

        A fixed fraction of the context window, used both as the
        compaction threshold and as the ceiling for generated tokens.
        """
        window = override_window or self.config.max_context_tokens or self.model.max_context_tokens
        return int(window * self.config.summary_percentage)

    def count_tokens(self, text: str) -> int:
        return self._counter.count(text)

    async def weave(
        self,
        conversation_id: ConversationId,
        system: str,
        message: str,
        override_window: Optional[int] = None,
        author: Optional[str] = None,
    ) -> str:
        """Prompt the model with the next message of a conversation.

        Args:
            conversation_id: Identity of the conversation.
            system: System instruction opening every request.
            message: The user's message.
            override_window: Usable context window for this turn, at most
                the model's maximum.
            author: Optional author of the message, sent as the name.

        Returns:
            The model's response.

        Raises:
            BadConfigError: If override_window exceeds the model maximum.
            BudgetExhaustedError: If no output tokens are left.
            CompletionFailedError: If a completion request fails.
            StorageFailedError: If loading or saving the fragment fails.
        """
        result = await self.weave_turn(
            conversation_id,
            system,
            message,
            override_window=override_window,
            author=author,
        )
        return result.response

    async def weave_turn(
        self,
        conversation_id: ConversationId,
        system: str,
        message: str,
        override_window: Optional[int] = None,
        author: Optional[str] = None,
    ) -> TurnResult:
        """Run one turn and return its full outcome. See ``weave``."""
        if override_window is not None:
            check_context_override(self.model, override_window)

        key = conversation_id.base_key()
        with conversation_context(key):
            return await self._run_turn(key, system, message, override_window, author or "")

    async def _run_turn(
        self,
        key: str,
        system: str,
        message: str,
        override_window: Optional[int],
        author: str,
    ) -> TurnResult:
        fragment = await self._fetch(key)
        reservation = self.tokens_available(override_window)
        incoming_tokens = self._counter.count(message)

        logger.debug(
            "turn_budget",
            reservation=reservation,
            fragment_tokens=fragment.total_tokens,
            incoming_tokens=incoming_tokens,
        )

        history = fragment.messages
        compacted = SummaryCompactor.should_compact(reservation, fragment, incoming_tokens)
        if compacted:
            logger.info("compaction_triggered", reservation=reservation)
            result = await self._compactor.compact(
                system, fragment, reservation, self.config.sampling
            )
            fragment = result.fragment
            # The seeded instruction is already the request's first message
            history = [self._assembler.summary_context(result.summary)]

        max_output_tokens = reservation - fragment.total_tokens - incoming_tokens
        if max_output_tokens <= 0:
            raise BudgetExhaustedError(
                f"No tokens left for a response: reservation {reservation}, "
                f"fragment {fragment.total_tokens}, message {incoming_tokens}",
                available=max_output_tokens,
            )

        user_message = Message(role=MessageRole.USER, content=message, author=author)
        request = self._assembler.response_request(
            system, history, user_message, max_output_tokens
        )
        logger.debug(
            "prompting",
            max_output_tokens=max_output_tokens,
            word_ceiling=words_for_tokens(max_output_tokens),
            request_messages=len(request),
        )
        try:
            response = await complete_or_raise(
                self._provider, request, max_output_tokens, self.config.sampling
            )
        except LoreweaverError as e:
            logger.error("prompt_failed", error=str(e))
            raise

        fragment.append(user_message, incoming_tokens)
        fragment.append_counted(
            Message(role=MessageRole.ASSISTANT, content=response, author=author),
            self._counter,
        )

        await self._save(key, fragment, new_fragment=compacted)
        logger.info(
            "turn_persisted",
            new_fragment=compacted,
            messages=len(fragment),
            total_tokens=fragment.total_tokens,
        )
        return TurnResult(
            response=response,
            compacted=compacted,
            reservation=reservation,
            max_output_tokens=max_output_tokens,
            fragment=fragment,
        )

    async def _fetch(self, key: str) -> Fragment:
        try:
            fragment = await self._store.fetch(key)
        except LoreweaverError:
            raise
        except Exception as e:
            logger.error("fragment_fetch_failed", error=str(e))
            raise StorageFailedError(f"Failed to fetch fragment: {e}", key=key) from e
        return fragment if fragment is not None else Fragment()

    async def _save(self, key: str, fragment: Fragment, new_fragment: bool) -> None:
        try:
            await self._store.save(key, fragment, new_fragment)
        except StorageFailedError as e:
            logger.error("fragment_save_failed", error=str(e))
            raise
        except Exception as e:
            logger.error("fragment_save_failed", error=str(e))
            raise StorageFailedError(f"Failed to save fragment: {e}", key=key) from e
