"""
Native Click implementation of the list command.

Usage: muxops list
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ...catalog import print_help
from ..decorators import pass_muxops_context

if TYPE_CHECKING:
    from ..context import MuxopsContext


@click.command("list")
@pass_muxops_context
def list_tasks(ctx: MuxopsContext) -> None:
    """List every documented task, sorted by name."""
    print_help(ctx.presenter, ctx.registry)
