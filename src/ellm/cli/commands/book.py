"""ellm book -- extract books from text and recommend by favourite themes."""

from __future__ import annotations

import click

from ellm.cli.formatting import format_book_result
from ellm.cli.options import global_options


@click.command()
@click.argument("message")
@click.option(
    "-n", "--top", "top_n", default=5, show_default=True,
    type=click.IntRange(min=1), help="Number of top themes to recommend for.",
)
@global_options
@click.pass_context
def book(ctx: click.Context, message: str, top_n: int) -> None:
    """Extract the books in MESSAGE, rank their themes, and recommend more."""
    from ellm.cli import _client_session
    from ellm.operations.books import run_book_pipeline

    with _client_session(ctx) as (client, console):
        result = run_book_pipeline(client, message, top_n=top_n)
        format_book_result(result, console)
