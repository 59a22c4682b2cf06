"""``llmwire inspect`` — show the vendor request a prompt would produce."""

from __future__ import annotations

import sys

import click

from llmwire.cli_commands._output import console, print_json, resolve_config, user_turn
from llmwire.core.interface.client import ModelClient
from llmwire.core.interface.errors import AdapterError
from llmwire.core.interface.models import CanonicalContent, GenerationOptions


@click.command("inspect")
@click.argument("prompt")
@click.option("--model", "-m", default=None, help="Model as provider/name.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="YAML model config.")
@click.option("--system", "-s", "system_prompt", default=None, help="System instruction.")
@click.option("--image", "images", multiple=True, type=click.Path(exists=True, dir_okay=False), help="Attach an image file.")
@click.option("--temperature", type=float, default=None)
@click.option("--max-tokens", type=int, default=None)
@click.option("--stop", "stop_sequences", multiple=True, help="Stop sequence (repeatable).")
@click.option("--stream", is_flag=True, help="Include the streaming parameters.")
def inspect_cmd(
    prompt: str,
    model: str | None,
    config_path: str | None,
    system_prompt: str | None,
    images: tuple[str, ...],
    temperature: float | None,
    max_tokens: int | None,
    stop_sequences: tuple[str, ...],
    stream: bool,
) -> None:
    """Print the request parameters PROMPT would be sent with. No network call is made."""
    try:
        config = resolve_config(config_path, model, None, None)
        options = GenerationOptions(
            temperature=temperature,
            max_output_tokens=max_tokens,
            stop_sequences=list(stop_sequences),
            system_instruction=CanonicalContent.system(system_prompt) if system_prompt else None,
        )
        params = ModelClient(config).build_request([user_turn(prompt, images)], options, stream=stream)
    except AdapterError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    print_json(params)
