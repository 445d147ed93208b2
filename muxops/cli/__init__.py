"""
Click-based CLI for muxops.

This module provides the main Click command group and serves as the
entry point for the muxops CLI. Besides its own subcommands the group
accepts bare task names, so `muxops test` is `muxops run test`.

Usage:
    from muxops.cli import cli
    cli()  # Invokes the CLI
"""

from __future__ import annotations

from pathlib import Path

import click

from .. import __version__
from ..catalog import print_help
from .context import MuxopsContext
from .decorators import handle_errors

RUN_COMMAND = "run"


class TaskGroup(click.Group):
    """Command group that treats unrecognized names as tasks to run."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        name = args[0] if args else ""
        if name and not name.startswith("-") and name not in self.commands:
            # The run command reports unknown tasks once the catalog is loaded
            return RUN_COMMAND, self.commands[RUN_COMMAND], list(args)
        return super().resolve_command(ctx, args)


@click.group(cls=TaskGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="muxops")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: nearest .muxops/config.toml or pyproject.toml).",
)
@click.pass_context
@handle_errors
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """muxops - task runner for multi-service development stacks

    Generates protobuf bindings, installs dependencies, runs tests with
    coverage and drives the container stack.

    \b
    Quick Start:
        muxops                  List available tasks
        muxops gen-proto        Generate Go and Python bindings
        muxops deps test        Install dependencies, then run all tests
        muxops up               Start the stack in the background

    \b
    Configuration:
        muxops config           View configuration
    """
    ctx.obj = MuxopsContext.create(config_path=config_path)

    if ctx.invoked_subcommand is None:
        print_help(ctx.obj.presenter, ctx.obj.registry)


def register_commands() -> None:
    """Register all CLI commands with the main group."""
    from .commands import COMMANDS

    for cmd in COMMANDS:
        cli.add_command(cmd)


# Register commands at module load time
register_commands()


# Export public API
__all__ = [
    "MuxopsContext",
    "TaskGroup",
    "__version__",
    "cli",
    "register_commands",
]
