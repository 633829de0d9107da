"""ellm send -- send a plain message and print the reply."""

from __future__ import annotations

import click

from ellm.cli.formatting import format_reply
from ellm.cli.options import global_options
from ellm.messages import Messages


@click.command()
@click.argument("message")
@global_options
@click.pass_context
def send(ctx: click.Context, message: str) -> None:
    """Send MESSAGE to Claude and print the reply."""
    from ellm.cli import _client_session

    with _client_session(ctx) as (client, console):
        console.print("Sending message to Claude...\n", style="dim")
        reply = client.send_message(Messages.from_prompt(message))
        format_reply(reply, console)
