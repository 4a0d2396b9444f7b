"""OpenAI completion provider implementation."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from openai import APIError, AsyncOpenAI, AuthenticationError, RateLimitError

from loreweaver.errors import CompletionFailedError
from loreweaver.observability.logging import get_logger

from ..base import LLMConfig, SamplingParams

logger = get_logger(__name__)


class OpenAIProvider:
    """Chat completion provider backed by the OpenAI API.

    The underlying AsyncOpenAI client is created once and only read
    afterwards, so a single provider can serve concurrent turns.
    """

    name = "openai"

    def __init__(self, config: LLMConfig, client: Optional[AsyncOpenAI] = None):
        """Initialize OpenAI provider.

        Args:
            config: LLM configuration with model, api_key, etc.
            client: Optional preconfigured client, mainly for tests.
        """
        self.config = config
        self._client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    def _error(self, error: Exception) -> CompletionFailedError:
        """Convert OpenAI errors to CompletionFailedError."""
        if isinstance(error, RateLimitError):
            status_code: Optional[int] = 429
        elif isinstance(error, AuthenticationError):
            status_code = 401
        else:
            status_code = getattr(error, "status_code", None)
        return CompletionFailedError(
            f"Failed to prompt OpenAI: {error}",
            provider=self.name,
            status_code=status_code,
        )

    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        sampling: SamplingParams,
    ) -> str:
        """Generate a completion using the chat completions API.

        Args:
            messages: Request messages, already in OpenAI shape.
            max_tokens: Ceiling on generated tokens.
            sampling: Temperature and penalties for the request.

        Returns:
            The content of the first choice.

        Raises:
            CompletionFailedError: On API errors or an empty response.
        """
        request_params: Dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        request_params.update(self.config.extra_params)
        request_params.update(sampling.to_dict())

        try:
            response = await self._client.chat.completions.create(**request_params)
        except APIError as e:
            logger.error("openai_request_failed", error=str(e))
            raise self._error(e) from e

        if not response.choices or response.choices[0].message.content is None:
            raise CompletionFailedError(
                "Failed to get content from OpenAI response", provider=self.name
            )

        if response.usage:
            logger.debug(
                "openai_usage",
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
            )
        return response.choices[0].message.content
