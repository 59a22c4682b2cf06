"""Shared CLI output formatters and input helpers."""

from __future__ import annotations

import json
import logging
import mimetypes
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from llmwire.core.interface.config import ModelConfig, load_model_config
from llmwire.core.interface.errors import ConfigError
from llmwire.core.interface.models import CanonicalContent, CanonicalResponse, ImagePart

DEFAULT_MODEL = "openai/gpt-4o"

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route library logs to stderr through rich; DEBUG when *verbose*."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def resolve_config(
    config_path: str | None,
    model: str | None,
    api_key: str | None,
    api_base: str | None,
) -> ModelConfig:
    """Build a ModelConfig from an optional YAML file plus CLI overrides."""
    if config_path is not None:
        return load_model_config(Path(config_path), model=model, api_key=api_key, api_base=api_base)
    try:
        return ModelConfig(model=model or DEFAULT_MODEL, api_key=api_key, api_base=api_base)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def user_turn(prompt: str, image_paths: tuple[str, ...] = ()) -> CanonicalContent:
    """Build the user turn from *prompt* and image files."""
    images: list[ImagePart] = []
    for raw_path in image_paths:
        path = Path(raw_path)
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        images.append(ImagePart(mime_type=mime_type, data=path.read_bytes()))
    return CanonicalContent.user(prompt, *images)


def print_response(response: CanonicalResponse, *, show_text: bool = True) -> None:
    """Pretty-print a completed response: text, function calls, usage."""
    if show_text and response.text:
        console.print(response.text, markup=False, highlight=False)

    calls = response.function_calls
    if calls:
        table = Table(title="Function Calls")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Arguments")
        for call in calls:
            table.add_row(call.id, call.name, _truncate(json.dumps(call.args)))
        console.print(table)

    summary = f"finish={response.finish_reason.value}"
    if response.usage is not None:
        usage = response.usage
        summary += (
            f" prompt={usage.prompt_tokens} completion={usage.completion_tokens}"
            f" total={usage.total_tokens}"
        )
    console.print(f"[dim]{summary}[/dim]")


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
