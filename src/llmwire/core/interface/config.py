"""Model configuration — provider, model name, endpoint and credentials."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from llmwire.core.interface.errors import ConfigError

SUPPORTED_PROVIDERS = ("openai", "anthropic")


class ModelConfig(BaseModel):
    """Configuration for a specific model/provider combination.

    The ``model`` field uses ``provider/model_name`` naming (e.g.
    ``openai/gpt-4o``, ``anthropic/claude-sonnet-4-5``). A bare model name
    means ``openai``, which also covers OpenAI-compatible servers reached
    through ``api_base`` (Ollama, vLLM). ``api_key`` and ``api_base`` are
    opaque; when unset the vendor SDK reads its own environment variables.
    """

    model: str
    api_key: str | None = None
    api_base: str | None = None
    default_max_tokens: int = 4096

    @field_validator("model")
    @classmethod
    def _check_provider(cls, value: str) -> str:
        if "/" in value:
            provider = value.split("/", 1)[0]
            if provider not in SUPPORTED_PROVIDERS:
                msg = f"unsupported provider '{provider}' (expected one of: {', '.join(SUPPORTED_PROVIDERS)})"
                raise ValueError(msg)
        return value

    @property
    def provider(self) -> str:
        """Extract the provider prefix from the model string."""
        if "/" in self.model:
            return self.model.split("/", 1)[0]
        return "openai"

    @property
    def model_name(self) -> str:
        """The model name as the vendor knows it, without the provider prefix."""
        if "/" in self.model:
            return self.model.split("/", 1)[1]
        return self.model


def load_model_config(path: Path, **overrides: Any) -> ModelConfig:
    """Read a YAML model config, interpolate env vars, and validate.

    Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
    before parsing. Keyword *overrides* that are not ``None`` replace values
    from the file.

    Raises:
        ConfigError: On read errors, YAML parse errors or validation failures.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Model config YAML must be a mapping")

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return ModelConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
