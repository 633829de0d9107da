"""Connection options accepted both before and after the subcommand.

``ellm --model X bool "Q?"`` and ``ellm bool --model X "Q?"`` are
equivalent. The values are stored in the shared ``ctx.obj`` dict; a value
given after the subcommand wins over one given before it.
"""

from __future__ import annotations

from typing import Any, Callable

import click


def _store(ctx: click.Context, param: click.Parameter, value: Any) -> None:
    obj = ctx.ensure_object(dict)
    if value is not None:
        obj[param.name] = value
    else:
        obj.setdefault(param.name, None)


def global_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Attach --api-key, --model and --max-tokens to a group or command."""
    f = click.option(
        "--max-tokens",
        default=None,
        type=click.IntRange(min=1),
        expose_value=False,
        callback=_store,
        help="Maximum tokens to generate [default: 4096].",
    )(f)
    f = click.option(
        "--model",
        default=None,
        expose_value=False,
        callback=_store,
        help="Model to use [default: claude-sonnet-4-5-20250929].",
    )(f)
    f = click.option(
        "--api-key",
        default=None,
        expose_value=False,
        callback=_store,
        help="API key for authentication (overrides environment and config file).",
    )(f)
    return f
