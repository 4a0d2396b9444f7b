"""Settings for wiring a loreweaver deployment.

Values are read from (highest priority first):
1. Keyword arguments
2. Environment variables (LOREWEAVER_*)
3. A .env file in the working directory
4. Defaults

Example:
    >>> settings = LoreweaverSettings()
    >>> manager = settings.build_manager()
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from loreweaver.context.manager import ContextWindowManager
from loreweaver.context.models import Models, TurnConfig
from loreweaver.llm.base import LLMConfig
from loreweaver.llm.providers.openai import OpenAIProvider
from loreweaver.observability.logging import LogConfig, LogLevel
from loreweaver.storage import (
    FileFragmentStore,
    FragmentStore,
    InMemoryFragmentStore,
    RedisFragmentStore,
    RedisStoreConfig,
)

StorageBackend = Literal["memory", "file", "redis"]


class LoreweaverSettings(BaseSettings):
    """Process-wide settings, fixed at start-up."""

    model_config = SettingsConfigDict(
        env_prefix="LOREWEAVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Turn configuration
    model: Models = Field(default=Models.GPT3, description="gpt3 or gpt4")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    presence_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    frequency_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    summary_percentage: float = Field(default=0.1, gt=0.0, le=1.0)
    max_context_tokens: Optional[int] = Field(default=None, gt=0)

    # OpenAI
    openai_api_key: Optional[SecretStr] = None
    openai_base_url: Optional[str] = None
    openai_timeout: float = Field(default=60.0, gt=0)

    # Storage
    storage: StorageBackend = "memory"
    storage_path: Path = Path("./loreweaver-data")
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[SecretStr] = None
    redis_ssl: bool = False
    redis_key_prefix: str = "loreweaver"

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_json: bool = False

    @field_validator("model", mode="before")
    @classmethod
    def _parse_model(cls, value: object) -> object:
        if isinstance(value, str):
            return Models.from_name(value.strip().lower())
        return value

    def turn_config(self) -> TurnConfig:
        """Build the TurnConfig for these settings.

        Raises:
            BadConfigError: If max_context_tokens exceeds the model window.
        """
        return TurnConfig(
            model=self.model,
            temperature=self.temperature,
            presence_penalty=self.presence_penalty,
            frequency_penalty=self.frequency_penalty,
            summary_percentage=self.summary_percentage,
            max_context_tokens=self.max_context_tokens,
        )

    def llm_config(self) -> LLMConfig:
        return LLMConfig(
            model=self.model.model_name,
            api_key=self.openai_api_key.get_secret_value() if self.openai_api_key else None,
            base_url=self.openai_base_url,
            timeout=self.openai_timeout,
        )

    def log_config(self) -> LogConfig:
        return LogConfig(level=self.log_level, json_format=self.log_json)

    def build_store(self) -> FragmentStore:
        """Create the configured fragment store."""
        if self.storage == "file":
            return FileFragmentStore(self.storage_path)
        if self.storage == "redis":
            return RedisFragmentStore(
                RedisStoreConfig(
                    host=self.redis_host,
                    port=self.redis_port,
                    db=self.redis_db,
                    password=(
                        self.redis_password.get_secret_value()
                        if self.redis_password
                        else None
                    ),
                    key_prefix=self.redis_key_prefix,
                    ssl=self.redis_ssl,
                )
            )
        return InMemoryFragmentStore()

    def build_manager(self) -> ContextWindowManager:
        """Wire an OpenAI-backed manager from these settings."""
        return ContextWindowManager(
            provider=OpenAIProvider(self.llm_config()),
            store=self.build_store(),
            config=self.turn_config(),
        )
