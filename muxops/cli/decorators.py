"""
Click decorators for muxops CLI commands.

Provides:
- handle_errors: Turns muxops exceptions into an error report and exit code
- pass_muxops_context: Typed alias for @click.pass_obj
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar

import click

from ..core.exceptions import MuxopsException, NonZeroExitError, TaskFailedError
from ..core.interfaces.presenter import IPresenter

F = TypeVar("F", bound=Callable[..., Any])


def _presenter() -> IPresenter:
    from ..core.di import resolve_or_default
    from ..presenters.console import ConsolePresenter

    return resolve_or_default(IPresenter, ConsolePresenter)  # type: ignore[type-abstract]


def _find_exit_error(error: BaseException) -> NonZeroExitError | None:
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, NonZeroExitError):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


def report_error(presenter: IPresenter, error: MuxopsException) -> None:
    """Print an error, with the failing command's details when there is one."""
    lines = [str(error)]
    if isinstance(error, TaskFailedError):
        exit_error = _find_exit_error(error)
        if exit_error is not None:
            lines += [
                f"  Task:      {error.task}",
                f"  Step:      {error.step_index + 1}",
                f"  Command:   {exit_error.command}",
                f"  Arguments: {' '.join(exit_error.args_list)}",
                f"  Exit code: {exit_error.code}",
            ]
    # Details stay on stderr with the error line
    presenter.print_error("\n".join(lines))


def handle_errors(f: F) -> F:
    """Decorator reporting MuxopsException and exiting with its exit code.

    Usage:
        @cli.command()
        @click.pass_obj
        @handle_errors
        def run(ctx: MuxopsContext, tasks: tuple[str, ...]):
            ...
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except MuxopsException as e:
            report_error(_presenter(), e)
            raise SystemExit(e.exit_code) from e

    return wrapper  # type: ignore[return-value]


def pass_muxops_context(f: F) -> F:
    """Convenience decorator combining @click.pass_obj with type hints.

    Usage:
        @cli.command()
        @pass_muxops_context
        def status(ctx: MuxopsContext):
            ...
    """
    return click.pass_obj(f)  # type: ignore[return-value]
