"""ellm bool -- ask a yes/no question; the exit status carries the answer."""

from __future__ import annotations

import click

from ellm.cli.formatting import format_bool_answer
from ellm.cli.options import global_options


@click.command("bool")
@click.argument("question")
@global_options
@click.pass_context
def bool_command(ctx: click.Context, question: str) -> None:
    """Ask Claude a yes/no QUESTION.

    Exits 0 when the answer is true and 1 when it is false. Errors also
    exit 1 but print an "Error:" message instead of an answer.
    """
    from ellm.cli import _client_session
    from ellm.operations.ask import ask_bool

    with _client_session(ctx) as (client, console):
        answer = ask_bool(client, question)
        format_bool_answer(answer, console)
        if not answer.answer:
            raise SystemExit(1)
