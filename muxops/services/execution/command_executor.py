"""
Command executor service.

Runs one external command with inherited standard streams and turns its
exit status into either an ExecutionResult or a typed error.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from ...core.exceptions import MuxopsExecutionError, NonZeroExitError, ToolNotFoundError
from ...core.interfaces.executor import ICommandExecutor
from ...core.interfaces.logger import ILogger
from ...core.models.execution import ExecutionResult
from .signal_handler import ProcessSignalHandler


class CommandExecutor(ICommandExecutor):
    """
    Executes external commands.

    Handles:
    - Binary resolution against the (possibly overridden) PATH
    - Environment layering
    - Exit status mapping (signals become 128 + N)
    - Registration with the signal handler while the child runs

    Usage:
        executor = CommandExecutor()
        executor.run("go", ["mod", "download"], workdir="backend-gateway")
    """

    def __init__(
        self,
        signal_handler: ProcessSignalHandler | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._signal_handler = signal_handler
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ...core.di import resolve_or_default
            from ..logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        workdir: Path | str | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> ExecutionResult:
        env = self._prepare_environment(env_overrides)
        binary = self._resolve_binary(command, env)
        cwd = self._check_workdir(workdir)
        argv = [binary, *args]

        self.logger.debug("Running %s (cwd=%s)", " ".join([command, *args]), cwd)
        try:
            process = subprocess.Popen(argv, cwd=cwd, env=env)
        except OSError as e:
            raise MuxopsExecutionError(
                f"Failed to start {command}: {e}", context={"command": command}, cause=e
            ) from e

        if self._signal_handler:
            self._signal_handler.track(process)
        try:
            returncode = process.wait()
        finally:
            if self._signal_handler:
                self._signal_handler.untrack(process)

        code = self._normalize_exit_code(returncode)
        self.logger.debug("%s exited with %d", command, code)
        if code != 0:
            raise NonZeroExitError(code, command=command, args=args, workdir=cwd)

        return ExecutionResult(command=command, args=tuple(args), workdir=cwd, exit_code=code)

    def capture(
        self,
        command: str,
        args: Sequence[str] = (),
        workdir: Path | str | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> str:
        env = self._prepare_environment(env_overrides)
        binary = self._resolve_binary(command, env)
        cwd = self._check_workdir(workdir)

        self.logger.debug("Capturing output of %s", " ".join([command, *args]))
        try:
            result = subprocess.run(
                [binary, *args],
                cwd=cwd,
                env=env,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise MuxopsExecutionError(
                f"Failed to start {command}: {e}", context={"command": command}, cause=e
            ) from e
        code = self._normalize_exit_code(result.returncode)
        if code != 0:
            self.logger.debug("%s stderr: %s", command, result.stderr.strip())
            raise NonZeroExitError(code, command=command, args=args, workdir=cwd)
        return result.stdout.strip()

    def _prepare_environment(self, env_overrides: Mapping[str, str] | None) -> dict[str, str]:
        env = os.environ.copy()
        if env_overrides:
            env.update(env_overrides)
        return env

    def _resolve_binary(self, command: str, env: Mapping[str, str]) -> str:
        binary = shutil.which(command, path=env.get("PATH"))
        if binary is None:
            raise ToolNotFoundError(command)
        return binary

    def _check_workdir(self, workdir: Path | str | None) -> str | None:
        if workdir is None:
            return None
        if not Path(workdir).is_dir():
            raise MuxopsExecutionError(
                f"Working directory does not exist: {workdir}",
                context={"workdir": str(workdir)},
            )
        return str(workdir)

    @staticmethod
    def _normalize_exit_code(returncode: int) -> int:
        # Popen reports death by signal N as -N
        if returncode < 0:
            return 128 - returncode
        return returncode
