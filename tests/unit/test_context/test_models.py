"""Tests for the model capability table and TurnConfig."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from loreweaver.context import (
    DEFAULT_MODEL,
    ModelProfile,
    Models,
    TurnConfig,
    check_context_override,
)
from loreweaver.errors import BadConfigError
from loreweaver.llm.base import SamplingParams


class TestModels:
    """Tests for the Models table."""

    def test_gpt3_profile(self):
        """Test GPT3 name and window."""
        assert Models.GPT3.model_name == "gpt-3.5-turbo"
        assert Models.GPT3.max_context_tokens == 4096

    def test_gpt4_profile(self):
        """Test GPT4 name and window."""
        assert Models.GPT4.profile == ModelProfile(name="gpt-4", max_context_tokens=8192)

    def test_default_model(self):
        """Test GPT3 is the default."""
        assert DEFAULT_MODEL is Models.GPT3

    @pytest.mark.parametrize(
        "name,expected",
        [("gpt3", Models.GPT3), ("gpt-3.5-turbo", Models.GPT3), ("gpt-4", Models.GPT4)],
    )
    def test_from_name(self, name, expected):
        """Test lookup by enum value or API name."""
        assert Models.from_name(name) is expected

    def test_from_unknown_name(self):
        """Test unknown names are configuration errors."""
        with pytest.raises(BadConfigError):
            Models.from_name("gpt-17")


class TestTurnConfig:
    """Tests for TurnConfig."""

    def test_defaults(self):
        """Test default configuration values."""
        config = TurnConfig()
        assert config.model is Models.GPT3
        assert config.temperature == 0.0
        assert config.presence_penalty == 0.0
        assert config.frequency_penalty == 0.0
        assert config.summary_percentage == 0.1
        assert config.max_context_tokens is None

    def test_sampling(self):
        """Test sampling parameters derive from the config."""
        config = TurnConfig(temperature=0.4, presence_penalty=1.0, frequency_penalty=0.2)
        assert config.sampling == SamplingParams(0.4, 1.0, 0.2)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("temperature", 2.5),
            ("presence_penalty", -3.0),
            ("frequency_penalty", 2.1),
            ("summary_percentage", 0.0),
            ("summary_percentage", 1.5),
        ],
    )
    def test_out_of_range_values(self, field, value):
        """Test ranges are validated."""
        with pytest.raises(ValidationError):
            TurnConfig(**{field: value})

    def test_context_override_above_model(self):
        """Test a deployment override larger than the model window."""
        with pytest.raises(BadConfigError):
            TurnConfig(model=Models.GPT3, max_context_tokens=8192)

    def test_context_override_within_model(self):
        """Test an override inside the model window."""
        assert TurnConfig(model=Models.GPT4, max_context_tokens=8192).max_context_tokens == 8192

    def test_frozen(self):
        """Test configuration is fixed after construction."""
        config = TurnConfig()
        with pytest.raises(ValidationError):
            config.temperature = 1.0


class TestCheckContextOverride:
    """Tests for check_context_override."""

    def test_accepts_model_max(self):
        """Test the model maximum itself is allowed."""
        check_context_override(Models.GPT3, 4096)

    def test_rejects_above_max(self):
        """Test message names the model."""
        with pytest.raises(BadConfigError, match="gpt-3.5-turbo"):
            check_context_override(Models.GPT3, 4097)

    def test_rejects_non_positive(self):
        """Test zero windows are rejected."""
        with pytest.raises(BadConfigError):
            check_context_override(Models.GPT3, 0)
