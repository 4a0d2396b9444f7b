"""Summary compaction of conversation fragments.

When a fragment no longer leaves room for the next turn, the whole
history is summarized by the model and a new fragment is started from
the system instruction plus that summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from loreweaver.context.assembler import FragmentAssembler, words_for_tokens
from loreweaver.context.counter import TokenCounter
from loreweaver.context.fragment import Fragment
from loreweaver.errors import BudgetExhaustedError
from loreweaver.llm.base import (
    CompletionProvider,
    SamplingParams,
    complete_or_raise,
    utcnow,
)
from loreweaver.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CompactionResult:
    """Result of a compaction operation."""

    fragment: Fragment
    summary: str
    summary_budget: int
    tokens_before: int
    messages_summarized: int
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def tokens_after(self) -> int:
        return self.fragment.total_tokens

    @property
    def tokens_freed(self) -> int:
        return self.tokens_before - self.tokens_after


class SummaryCompactor:
    """Replaces a fragment with a model-written summary of it."""

    def __init__(
        self,
        provider: CompletionProvider,
        counter: TokenCounter,
        assembler: Optional[FragmentAssembler] = None,
    ):
        self._provider = provider
        self._counter = counter
        self._assembler = assembler or FragmentAssembler()

    @staticmethod
    def should_compact(reservation: int, fragment: Fragment, incoming_tokens: int) -> bool:
        """Whether the fragment plus the incoming message reaches the reservation."""
        return reservation <= fragment.total_tokens + incoming_tokens

    async def compact(
        self,
        system_instruction: str,
        fragment: Fragment,
        reservation: int,
        sampling: SamplingParams,
    ) -> CompactionResult:
        """Summarize a fragment into a new one.

        The summary may use whatever is left of the reservation after the
        current history.

        Args:
            system_instruction: Instruction that opens every request.
            fragment: The fragment to summarize. It is not modified.
            reservation: Token reservation for this turn.
            sampling: Sampling parameters for the summary request.

        Returns:
            CompactionResult holding the new fragment.

        Raises:
            BudgetExhaustedError: If no tokens are left for the summary.
            CompletionFailedError: If the provider fails.
        """
        summary_budget = reservation - fragment.total_tokens
        if summary_budget <= 0:
            raise BudgetExhaustedError(
                f"No tokens left to summarize the conversation: reservation "
                f"{reservation}, fragment holds {fragment.total_tokens}",
                available=summary_budget,
            )

        logger.debug(
            "compaction_request",
            summary_budget=summary_budget,
            word_ceiling=words_for_tokens(summary_budget),
            messages=len(fragment),
        )
        request = self._assembler.summary_request(
            system_instruction, fragment.messages, summary_budget
        )
        summary = await complete_or_raise(
            self._provider, request, summary_budget, sampling
        )

        compacted = Fragment.compacted(system_instruction, summary, self._counter)
        logger.info(
            "fragment_compacted",
            tokens_before=fragment.total_tokens,
            tokens_after=compacted.total_tokens,
        )
        return CompactionResult(
            fragment=compacted,
            summary=summary,
            summary_budget=summary_budget,
            tokens_before=fragment.total_tokens,
            messages_summarized=len(fragment),
        )
