"""ellm config -- show the effective configuration."""

from __future__ import annotations

import click

from ellm.cli.formatting import format_config, format_error, get_console
from ellm.cli.options import global_options
from ellm.config import Config
from ellm.exceptions import ConfigError


@click.command()
@global_options
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration (API key masked)."""
    console = get_console()
    try:
        cfg = Config.load(ctx.obj["api_key"])
    except ConfigError as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    if ctx.obj["model"] is not None:
        cfg = cfg.with_model(ctx.obj["model"])
    if ctx.obj["max_tokens"] is not None:
        cfg = cfg.with_max_tokens(ctx.obj["max_tokens"])
    format_config(cfg, Config.config_path(), console)
