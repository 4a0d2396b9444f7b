"""Build provider request messages from conversation messages."""

from __future__ import annotations

from typing import Dict, Iterable, List

from loreweaver.llm.base import Message, MessageRole

TOKEN_WORD_RATIO = 0.75
"""Every token equates to roughly 75% of a word."""

SUMMARY_DIRECTIVE = (
    "Generate a summary of the entire conversation so far. "
    "Respond with {words} words or less"
)
RESPONSE_DIRECTIVE = "Respond with {words} words or less"
SUMMARY_CONTEXT = '\n"""\n {summary}'


def words_for_tokens(tokens: int) -> int:
    """Approximate word count that fits in the given token budget."""
    return int(max(0, tokens) * TOKEN_WORD_RATIO)


class FragmentAssembler:
    """Turns Message records into chat completion request messages.

    Order is preserved. The ``name`` field carries the author and is only
    set for user and assistant messages that have one.
    """

    def to_request(self, message: Message) -> Dict[str, str]:
        """Convert a single message.

        Raises:
            InvalidRoleError: If the message role is unknown.
        """
        role = MessageRole.parse(message.role)
        request = {"role": role.value, "content": message.content}
        if role.carries_author and message.author:
            request["name"] = message.author
        return request

    def build(self, messages: Iterable[Message]) -> List[Dict[str, str]]:
        return [self.to_request(message) for message in messages]

    def summary_context(self, summary: str) -> Message:
        """System message quoting a fresh summary for the reply request."""
        return Message.system(SUMMARY_CONTEXT.format(summary=summary))

    def summary_request(
        self,
        system_instruction: str,
        history: Iterable[Message],
        summary_tokens: int,
    ) -> List[Dict[str, str]]:
        """Request asking the model to summarize the whole history."""
        return self.build(
            [
                Message.system(system_instruction),
                *history,
                Message.system(
                    SUMMARY_DIRECTIVE.format(words=words_for_tokens(summary_tokens))
                ),
            ]
        )

    def response_request(
        self,
        system_instruction: str,
        history: Iterable[Message],
        user_message: Message,
        max_output_tokens: int,
    ) -> List[Dict[str, str]]:
        """Request for the model's reply to a new user message."""
        return self.build(
            [
                Message.system(system_instruction),
                *history,
                user_message,
                Message.system(
                    RESPONSE_DIRECTIVE.format(words=words_for_tokens(max_output_tokens))
                ),
            ]
        )
