"""Rich formatting helpers for the ellm CLI.

Provides functions that format results for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from ellm.config import Config
    from ellm.models.answers import BoolAnswer
    from ellm.operations.books import BookPipelineResult


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_reply(text: str, console: Console) -> None:
    """Print a raw model reply verbatim."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def format_config(config: Config, config_path: Path, console: Console) -> None:
    """Display the effective configuration with the API key masked."""
    console.print("[bold]Current Configuration:[/bold]")
    console.print(f"  API Key:    {escape(config.masked_key())}", highlight=False)
    console.print(f"  Base URL:   {escape(config.base_url)}", highlight=False)
    console.print(f"  Model:      {escape(config.model)}", highlight=False)
    console.print(f"  Max Tokens: {config.max_tokens}", highlight=False)
    console.print()
    console.print(f"Config file location: {escape(str(config_path))}", highlight=False)
    if config_path.exists():
        console.print("  Status: [green]Found[/green]")
    else:
        console.print("  Status: [dim]Not found[/dim]")


def format_bool_answer(answer: BoolAnswer, console: Console) -> None:
    """Display a yes/no answer and its explanation."""
    if answer.answer:
        console.print("[green]Answer: true[/green]")
    else:
        console.print("[red]Answer: false[/red]")
    console.print(escape(answer.explanation), highlight=False)


def format_book_result(result: BookPipelineResult, console: Console) -> None:
    """Display extracted books, the theme tally and recommendations."""
    books = result.listing.all_books()
    if not books:
        console.print("[dim]No books found.[/dim]")
        return

    table = Table(title="Books", show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Title")
    table.add_column("Authors", style="dim")
    table.add_column("Score", justify="right")
    table.add_column("Themes", style="cyan")
    for book in books:
        color = "green" if book.score > 0 else "red" if book.score < 0 else "yellow"
        table.add_row(
            escape(book.title),
            escape(", ".join(book.authors)),
            f"[{color}]{book.score:+d}[/{color}]",
            escape(", ".join(book.themes)),
        )
    console.print(table)
    console.print()

    console.print("[bold]Top themes:[/bold]")
    for theme in result.themes:
        console.print(f"  {escape(theme)} ({result.tally[theme]:+d})", highlight=False)

    recs = result.recommendations.recommendations
    if not recs:
        return
    console.print()
    rec_table = Table(
        title="Recommendations", show_header=True, header_style="bold", box=None, pad_edge=False,
    )
    rec_table.add_column("Title")
    rec_table.add_column("Authors", style="dim")
    rec_table.add_column("Why")
    for rec in recs:
        rec_table.add_row(
            escape(rec.title),
            escape(", ".join(rec.authors)),
            escape(rec.reason),
        )
    console.print(rec_table)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
