"""ellm CLI -- terminal interface for the Anthropic Messages API.

This module is NEVER imported from ellm/__init__.py.
It is only loaded via the ``ellm`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler

from ellm.cli.formatting import format_error, get_console
from ellm.cli.options import global_options
from ellm.exceptions import EllmError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ellm.llm.client import AnthropicClient


def _configure_logging(verbose: bool) -> None:
    """Route library logs to stderr through Rich."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO; only surface it when debugging.
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.WARNING)


@click.group()
@global_options
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.version_option(package_name="ellm")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """ellm: interact with Claude from the command line.

    --api-key, --model and --max-tokens may also be given after the
    subcommand name.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)


def _get_client(ctx: click.Context) -> AnthropicClient:
    """Build an AnthropicClient from Click context.

    Configuration precedence: --api-key, then ANTHROPIC_API_KEY, then
    the config file. --model and --max-tokens override the loaded values.
    """
    from ellm.llm.client import AnthropicClient

    return AnthropicClient.from_options(
        api_key=ctx.obj["api_key"],
        model=ctx.obj["model"],
        max_tokens=ctx.obj["max_tokens"],
    )


@contextmanager
def _client_session(ctx: click.Context) -> Iterator[tuple[AnthropicClient, Console]]:
    """Context manager that builds a client, yields (client, console), and handles cleanup.

    Ensures the client is closed on exit and formats ellm errors as CLI
    errors with exit status 1.
    """
    console = get_console()
    try:
        client = _get_client(ctx)
        try:
            yield client, console
        finally:
            client.close()
    except EllmError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from ellm.cli.commands.book import book  # noqa: E402
from ellm.cli.commands.boolean import bool_command  # noqa: E402
from ellm.cli.commands.config import config  # noqa: E402
from ellm.cli.commands.send import send  # noqa: E402

cli.add_command(send)
cli.add_command(config)
cli.add_command(bool_command)
cli.add_command(book)
