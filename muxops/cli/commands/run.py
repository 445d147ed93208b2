"""
Native Click implementation of the run command.

Usage: muxops run <task>... [--jobs N] [--skip TASK] [--dry-run]

Bare task names (`muxops test`) are routed here by the CLI group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ...services.execution import ProcessSignalHandler
from ..decorators import handle_errors, pass_muxops_context

if TYPE_CHECKING:
    from ..context import MuxopsContext


@click.command("run")
@click.argument("tasks", nargs=-1, required=True)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    default=None,
    help="Run up to N independent tasks at once (default: execution.jobs).",
)
@click.option(
    "--skip",
    "skip",
    multiple=True,
    metavar="TASK",
    help="Treat TASK as already done. May be repeated.",
)
@click.option("--dry-run", is_flag=True, help="Print the execution order and exit.")
@pass_muxops_context
@handle_errors
def run(
    ctx: MuxopsContext,
    tasks: tuple[str, ...],
    jobs: int | None,
    skip: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Run tasks and everything they depend on.

    Prerequisites run first, each task at most once per invocation. The
    first failing step aborts the run and exits with the failing command's
    exit code.

    \b
    Examples:
        muxops run test                 # All service test suites
        muxops run deps test -j 3       # Independent tasks in parallel
        muxops run restart --skip down  # Start without stopping first
    """
    executor = ctx.graph_executor(jobs)

    if dry_run:
        for index, name in enumerate(executor.plan(*tasks, skip=skip), start=1):
            marker = " (skipped)" if name in skip else ""
            ctx.presenter.print(f"{index:>3}. {name}{marker}")
        return

    with ctx.container.resolve(ProcessSignalHandler):
        executor.run(*tasks, skip=skip)
