"""
Command executor interface.

The executor is the only component that starts external processes; every
other component receives one so tests can substitute a recording fake.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path

from ..models.execution import ExecutionResult


class ICommandExecutor(ABC):
    """Runs a single external command with inherited standard streams."""

    @abstractmethod
    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        workdir: Path | str | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> ExecutionResult:
        """
        Run a command to completion.

        Args:
            command: Binary name or path
            args: Arguments passed verbatim
            workdir: Working directory for the child (defaults to cwd)
            env_overrides: Variables layered over the parent environment

        Returns:
            ExecutionResult of the successful run

        Raises:
            ToolNotFoundError: If the binary cannot be resolved
            NonZeroExitError: If the command exits non-zero
        """
        pass

    @abstractmethod
    def capture(
        self,
        command: str,
        args: Sequence[str] = (),
        workdir: Path | str | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> str:
        """
        Run a command and return its stripped standard output.

        Raises:
            ToolNotFoundError: If the binary cannot be resolved
            NonZeroExitError: If the command exits non-zero
        """
        pass
