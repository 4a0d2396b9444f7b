"""Base types and protocols for completion providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

from loreweaver.errors import CompletionFailedError, InvalidRoleError, LoreweaverError


class MessageRole(str, Enum):
    """Role of a message in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"

    @classmethod
    def parse(cls, value: Any) -> "MessageRole":
        """Coerce a role or role string into a MessageRole.

        Raises:
            InvalidRoleError: If the value names no known role.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidRoleError(value) from None

    @property
    def carries_author(self) -> bool:
        """Whether messages of this role keep an author."""
        return self in (MessageRole.USER, MessageRole.ASSISTANT)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """A single message in a conversation fragment.

    Messages are immutable. The author is only kept for user and
    assistant messages; system and function messages have none.
    """

    role: MessageRole
    content: str
    author: str = ""
    timestamp: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", MessageRole.parse(self.role))
        if not self.role.carries_author and self.author:
            object.__setattr__(self, "author", "")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=MessageRole.SYSTEM, content=content)

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary format for storage."""
        return {
            "role": self.role.value,
            "author": self.author,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """Rebuild a message from its stored dictionary form.

        Timestamps stored without an offset are read as UTC.

        Raises:
            InvalidRoleError: If the stored role is unknown.
        """
        raw_timestamp = data.get("timestamp")
        timestamp = datetime.fromisoformat(raw_timestamp) if raw_timestamp else utcnow()
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            role=MessageRole.parse(data.get("role")),
            content=data.get("content", ""),
            author=data.get("author", "") or "",
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class SamplingParams:
    """Sampling parameters passed with every completion request."""

    temperature: float = 0.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "temperature": self.temperature,
            "presence_penalty": self.presence_penalty,
            "frequency_penalty": self.frequency_penalty,
        }


@dataclass
class LLMConfig:
    """Configuration for a completion provider client."""

    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = 60.0
    extra_params: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class CompletionProvider(Protocol):
    """Protocol for completion providers.

    A provider is created once per process and shared by every turn.
    Implementations must not mutate their configuration after
    construction, and must raise CompletionFailedError on failure.
    """

    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        sampling: SamplingParams,
    ) -> str:
        """Generate text for the given request messages.

        Args:
            messages: Provider-shaped request messages, in order.
            max_tokens: Ceiling on generated tokens.
            sampling: Sampling parameters for the request.

        Returns:
            The generated text.
        """
        ...


async def complete_or_raise(
    provider: CompletionProvider,
    messages: List[Dict[str, str]],
    max_tokens: int,
    sampling: SamplingParams,
) -> str:
    """Call a provider, turning any untyped failure into CompletionFailedError."""
    try:
        return await provider.complete(messages, max_tokens, sampling)
    except LoreweaverError:
        raise
    except Exception as e:
        raise CompletionFailedError(
            f"Completion provider failed: {e}",
            provider=getattr(provider, "name", type(provider).__name__),
        ) from e
