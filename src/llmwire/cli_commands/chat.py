"""``llmwire chat`` — send one prompt to a model and print the answer."""

from __future__ import annotations

import asyncio
import sys

import click

from llmwire.cli_commands._output import (
    configure_logging,
    console,
    print_json,
    print_response,
    resolve_config,
    user_turn,
)
from llmwire.core.interface.client import ModelClient
from llmwire.core.interface.errors import AdapterError
from llmwire.core.interface.models import CanonicalContent, CanonicalResponse, GenerationOptions


@click.command()
@click.argument("prompt")
@click.option("--model", "-m", default=None, help="Model as provider/name, e.g. anthropic/claude-sonnet-4-5.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None, help="YAML model config.")
@click.option("--api-key", default=None, help="API key (defaults to the vendor's env var).")
@click.option("--api-base", default=None, help="API base URL, e.g. http://localhost:11434/v1 for Ollama.")
@click.option("--system", "-s", "system_prompt", default=None, help="System instruction.")
@click.option("--image", "images", multiple=True, type=click.Path(exists=True, dir_okay=False), help="Attach an image file.")
@click.option("--temperature", type=float, default=None)
@click.option("--max-tokens", type=int, default=None)
@click.option("--stream/--no-stream", default=True, help="Stream the answer as it is generated.")
@click.option("--json", "as_json", is_flag=True, help="Print the final response as JSON.")
@click.option("--telemetry", is_flag=True, help="Export trace spans to the console.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def chat(
    prompt: str,
    model: str | None,
    config_path: str | None,
    api_key: str | None,
    api_base: str | None,
    system_prompt: str | None,
    images: tuple[str, ...],
    temperature: float | None,
    max_tokens: int | None,
    stream: bool,
    as_json: bool,
    telemetry: bool,
    verbose: bool,
) -> None:
    """Send PROMPT as a single user turn and print the model's answer."""
    configure_logging(verbose)

    if telemetry:
        from llmwire.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(export_to_console=True)
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    try:
        config = resolve_config(config_path, model, api_key, api_base)
    except AdapterError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    options = GenerationOptions(
        temperature=temperature,
        max_output_tokens=max_tokens,
        system_instruction=CanonicalContent.system(system_prompt) if system_prompt else None,
    )
    history = [user_turn(prompt, images)]
    client = ModelClient(config)

    try:
        response = asyncio.run(_converse(client, history, options, stream=stream, echo=not as_json))
    except AdapterError as exc:
        console.print(f"\n[red]Error:[/red] {exc}")
        sys.exit(1)

    if as_json:
        print_json(response.model_dump(mode="json"))
    else:
        print_response(response, show_text=not stream)


async def _converse(
    client: ModelClient,
    history: list[CanonicalContent],
    options: GenerationOptions,
    *,
    stream: bool,
    echo: bool,
) -> CanonicalResponse:
    try:
        if not stream:
            return await client.generate(history, options)

        final: CanonicalResponse | None = None
        async with client.generate_stream(history, options) as responses:
            async for response in responses:
                if response.partial:
                    if echo:
                        console.print(response.text, end="", markup=False, highlight=False)
                else:
                    final = response
        if echo:
            console.print()
        assert final is not None
        return final
    finally:
        await client.aclose()
