"""Conversation identities and fragments.

A fragment is the storable slice of a conversation that is currently in
play. Compaction never edits a fragment's history in place; it starts a
new fragment seeded with the system instruction and a summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Protocol, runtime_checkable

from loreweaver.context.counter import TokenCounter
from loreweaver.llm.base import Message, MessageRole


@runtime_checkable
class ConversationId(Protocol):
    """Caller supplied identity of a conversation.

    Implementations must return a stable, unique key. The engine never
    mutates an identity.
    """

    def base_key(self) -> str:
        """Return the key fragments are stored under."""
        ...


@dataclass(frozen=True)
class ConversationKey:
    """ConversationId built from one or more string parts.

    Example:
        ConversationKey("guild-1", "channel-7").base_key() == "guild-1:channel-7"
    """

    parts: tuple

    def __init__(self, *parts: str):
        if not parts or not all(parts):
            raise ValueError("ConversationKey needs at least one non-empty part")
        object.__setattr__(self, "parts", tuple(str(part) for part in parts))

    def base_key(self) -> str:
        return ":".join(self.parts)

    def __str__(self) -> str:
        return self.base_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConversationKey):
            return NotImplemented
        return self.base_key() == other.base_key()

    def __hash__(self) -> int:
        return hash(self.base_key())


@dataclass
class Fragment:
    """Ordered messages plus their aggregate token count.

    ``total_tokens`` tracks the contents of every counted message. The
    first ``uncounted`` messages are excluded from it; a compacted
    fragment uses this for the re-seeded system instruction.
    """

    messages: List[Message] = field(default_factory=list)
    total_tokens: int = 0
    uncounted: int = 0

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def is_empty(self) -> bool:
        return not self.messages

    @property
    def counted_messages(self) -> List[Message]:
        return self.messages[self.uncounted:]

    def append(self, message: Message, tokens: int) -> None:
        """Append a message and add its token count to the total.

        Timestamps never go backwards within a fragment.
        """
        if tokens < 0:
            raise ValueError(f"Token count cannot be negative: {tokens}")
        if self.messages and message.timestamp < self.messages[-1].timestamp:
            message = replace(message, timestamp=self.messages[-1].timestamp)
        self.messages.append(message)
        self.total_tokens += tokens

    def append_counted(self, message: Message, counter: TokenCounter) -> None:
        self.append(message, counter.count(message.content))

    def recount(self, counter: TokenCounter) -> int:
        """Recompute the token total from message contents."""
        return sum(counter.count(msg.content) for msg in self.counted_messages)

    def is_consistent(self, counter: TokenCounter) -> bool:
        return self.recount(counter) == self.total_tokens

    @classmethod
    def compacted(
        cls,
        system_instruction: str,
        summary: str,
        counter: TokenCounter,
    ) -> "Fragment":
        """Start a new fragment from a summary of the previous one."""
        fragment = cls(
            messages=[Message(role=MessageRole.SYSTEM, content=system_instruction)],
            uncounted=1,
        )
        fragment.append_counted(Message(role=MessageRole.SYSTEM, content=summary), counter)
        return fragment

    def to_dict(self) -> Dict[str, Any]:
        """Convert fragment to dictionary format for storage."""
        return {
            "total_tokens": self.total_tokens,
            "uncounted": self.uncounted,
            "messages": [msg.to_dict() for msg in self.messages],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fragment":
        return cls(
            messages=[Message.from_dict(item) for item in data.get("messages", [])],
            total_tokens=int(data.get("total_tokens", 0)),
            uncounted=int(data.get("uncounted", 0)),
        )
