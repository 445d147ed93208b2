"""
Native Click implementation of the config command.

Usage: muxops config [list|get] [key]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ...config import config_get, config_list
from ..decorators import pass_muxops_context

if TYPE_CHECKING:
    from ..context import MuxopsContext


@click.group("config", invoke_without_command=True)
@click.pass_context
def config(ctx: click.Context) -> None:
    """View configuration.

    Config is read from .muxops/config.toml or [tool.muxops] in
    pyproject.toml, and can be overridden with MUXOPS_<SECTION>__<KEY>
    environment variables.

    \b
    Examples:

        muxops config list                 # List all options

        muxops config get compose.command  # Get a value
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@config.command("list")
@pass_muxops_context
def config_list_cmd(ctx: MuxopsContext) -> None:
    """List all config options."""
    source = ctx.settings.config_file or "(defaults)"
    click.echo(f"Config file: {source}")
    click.echo(f"Project root: {ctx.settings.project_root}")
    click.echo("")
    click.echo("Available config options:")
    click.echo("")

    for key, info in config_list().items():
        click.echo(f"  {key}")
        click.echo(f"    {info['description']}")
        click.echo(f"    Default: {info['default']}")
        click.echo("")


@config.command("get")
@click.argument("key")
@pass_muxops_context
def config_get_cmd(ctx: MuxopsContext, key: str) -> None:
    """Get a config value.

    Arguments:

        KEY    The config key to get (e.g. toolchain.protoc)
    """
    value = config_get(key, settings=ctx.settings)
    if value is None:
        click.echo(f"{key}: (not set)")
    else:
        click.echo(f"{key}: {value}")
