"""
Compose manager.

Thin wrapper over the container orchestrator's up/down/logs commands.
"""

from __future__ import annotations

from ...core.exceptions import MuxopsException
from ...core.interfaces.executor import ICommandExecutor
from ...core.interfaces.logger import ILogger
from ...core.variables import VariableResolver


class ComposeManager:
    """
    Starts, stops and tails the container stack.

    The compose binary and optional compose file are taken from the
    `compose` and `compose_file` variables. Commands run in the project root.
    """

    def __init__(
        self,
        executor: ICommandExecutor,
        variables: VariableResolver,
        logger: ILogger | None = None,
    ) -> None:
        self._executor = executor
        self._variables = variables
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ...core.di import resolve_or_default
            from ..logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    def _compose(self, *args: str) -> None:
        base: list[str] = []
        if "compose_file" in self._variables:
            base = ["-f", self._variables.resolve("compose_file")]
        self._executor.run(
            self._variables.resolve("compose"),
            [*base, *args],
            workdir=self._variables.resolve("project_root"),
        )

    def up(self) -> None:
        """Build images and start the stack in the background."""
        self._compose("up", "-d", "--build")

    def down(self) -> None:
        """Stop and remove the stack."""
        self._compose("down")

    def logs(self) -> None:
        """Follow container logs until interrupted."""
        self._compose("logs", "-f")

    def restart(self) -> None:
        """
        Stop, then start the stack.

        If starting fails, a best-effort stop is issued so the stack is not
        left half started, and the start failure is raised.
        """
        self.down()
        try:
            self.up()
        except MuxopsException:
            self.logger.warning("Restart failed to start the stack, stopping it again")
            try:
                self.down()
            except MuxopsException as cleanup_error:
                self.logger.warning("Cleanup after failed restart also failed: %s", cleanup_error)
            raise
