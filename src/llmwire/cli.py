"""llmwire CLI entrypoint."""

from __future__ import annotations

import click

from llmwire import __version__


@click.group()
@click.version_option(version=__version__, prog_name="llmwire")
def main() -> None:
    """llmwire — talk to Chat Completions and Messages models through one canonical interface."""


# Register subcommands
from llmwire.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
