"""Tests for ModelConfig and the YAML config loader."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from llmwire.core.interface.config import ModelConfig, load_model_config
from llmwire.core.interface.errors import ConfigError

if TYPE_CHECKING:
    from pathlib import Path


class TestModelConfig:
    def test_provider_extraction(self) -> None:
        config = ModelConfig(model="anthropic/claude-sonnet-4-5")
        assert config.provider == "anthropic"
        assert config.model_name == "claude-sonnet-4-5"

    def test_provider_no_prefix(self) -> None:
        config = ModelConfig(model="gpt-4o")
        assert config.provider == "openai"
        assert config.model_name == "gpt-4o"

    def test_nested_model_name(self) -> None:
        config = ModelConfig(model="openai/meta-llama/Llama-3-8b")
        assert config.model_name == "meta-llama/Llama-3-8b"

    def test_unsupported_provider(self) -> None:
        with pytest.raises(ValidationError, match="unsupported provider 'gemini'"):
            ModelConfig(model="gemini/gemini-2.0-flash")

    def test_defaults(self) -> None:
        config = ModelConfig(model="gpt-4o")
        assert config.api_key is None
        assert config.api_base is None
        assert config.default_max_tokens == 4096


class TestLoadModelConfig:
    def test_load(self, tmp_path: Path) -> None:
        f = tmp_path / "model.yaml"
        f.write_text("model: anthropic/claude-sonnet-4-5\ndefault_max_tokens: 2048\n")

        config = load_model_config(f)

        assert config.provider == "anthropic"
        assert config.default_max_tokens == 2048

    def test_env_interpolation(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLMWIRE_TEST_KEY", "sk-from-env")
        f = tmp_path / "model.yaml"
        f.write_text("model: gpt-4o\napi_key: ${LLMWIRE_TEST_KEY}\n")

        assert load_model_config(f).api_key == "sk-from-env"

    def test_overrides(self, tmp_path: Path) -> None:
        f = tmp_path / "model.yaml"
        f.write_text("model: gpt-4o\napi_base: http://localhost:11434/v1\n")

        config = load_model_config(f, model="openai/gpt-4o-mini", api_base=None)

        assert config.model_name == "gpt-4o-mini"
        assert config.api_base == "http://localhost:11434/v1"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            load_model_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "model.yaml"
        f.write_text("model: [unclosed\n")
        with pytest.raises(ConfigError, match="YAML parse error"):
            load_model_config(f)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        f = tmp_path / "model.yaml"
        f.write_text("- gpt-4o\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_model_config(f)

    def test_empty_file_needs_model(self, tmp_path: Path) -> None:
        f = tmp_path / "model.yaml"
        f.write_text("")
        with pytest.raises(ConfigError, match="model"):
            load_model_config(f)

    def test_empty_file_with_override(self, tmp_path: Path) -> None:
        f = tmp_path / "model.yaml"
        f.write_text("")
        assert load_model_config(f, model="gpt-4o").model == "gpt-4o"
