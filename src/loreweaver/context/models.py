"""Model capability table and per-deployment turn configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from loreweaver.errors import BadConfigError
from loreweaver.llm.base import SamplingParams


@dataclass(frozen=True)
class ModelProfile:
    """Static descriptor of a chat model."""

    name: str
    max_context_tokens: int


class Models(str, Enum):
    """The chat models that are available to use."""

    GPT3 = "gpt3"
    GPT4 = "gpt4"

    @property
    def profile(self) -> ModelProfile:
        return MODEL_PROFILES[self]

    @property
    def model_name(self) -> str:
        """API name of the model."""
        return self.profile.name

    @property
    def max_context_tokens(self) -> int:
        """Maximum number of tokens the model processes in one request."""
        return self.profile.max_context_tokens

    @classmethod
    def from_name(cls, name: str) -> "Models":
        """Look up a model by enum value or API name.

        Raises:
            BadConfigError: If the name matches no known model.
        """
        for model in cls:
            if name in (model.value, model.model_name):
                return model
        raise BadConfigError(
            f"Unknown model: {name}. Available: "
            f"{[model.model_name for model in cls]}"
        )


MODEL_PROFILES: Dict[Models, ModelProfile] = {
    Models.GPT3: ModelProfile(name="gpt-3.5-turbo", max_context_tokens=4_096),
    Models.GPT4: ModelProfile(name="gpt-4", max_context_tokens=8_192),
}

DEFAULT_MODEL = Models.GPT3


class TurnConfig(BaseModel):
    """Configuration fixed when a context window manager is built."""

    model_config = ConfigDict(frozen=True)

    model: Models = Field(default=DEFAULT_MODEL, description="Chat model to prompt")
    temperature: float = Field(
        default=0.0, ge=0.0, le=2.0, description="Sampling temperature"
    )
    presence_penalty: float = Field(
        default=0.0, ge=-2.0, le=2.0, description="Penalty for tokens already present"
    )
    frequency_penalty: float = Field(
        default=0.0, ge=-2.0, le=2.0, description="Penalty scaled by token frequency"
    )
    summary_percentage: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Fraction of the context window reserved for compaction",
    )
    max_context_tokens: Optional[int] = Field(
        default=None,
        gt=0,
        description="Deployment-wide override of the usable context window",
    )

    @model_validator(mode="after")
    def _check_context_override(self) -> "TurnConfig":
        if self.max_context_tokens is not None:
            check_context_override(self.model, self.max_context_tokens)
        return self

    @property
    def sampling(self) -> SamplingParams:
        return SamplingParams(
            temperature=self.temperature,
            presence_penalty=self.presence_penalty,
            frequency_penalty=self.frequency_penalty,
        )


def check_context_override(model: Models, override: int) -> None:
    """Ensure an override does not exceed the model's real context window.

    Raises:
        BadConfigError: If the override is larger than the model allows.
    """
    if override > model.max_context_tokens:
        raise BadConfigError(
            f"Custom max tokens cannot be greater than model {model.model_name} "
            f"max tokens: {model.max_context_tokens}"
        )
    if override <= 0:
        raise BadConfigError(f"Custom max tokens must be positive, got {override}")
