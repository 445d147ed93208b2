"""
Custom exception hierarchy for muxops.

Every failure the task engine can report is a typed exception carrying a
human-readable message, a context dict for diagnostics and a suggested CLI
exit code.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.execution import RunReport


class MuxopsException(Exception):
    """
    Base exception for all muxops errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (paths, commands, etc.)
        exit_code: Suggested exit code for CLI (default: 1)
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class MuxopsConfigError(MuxopsException):
    """Base class for configuration-related errors."""

    pass


class ConfigFileError(MuxopsConfigError):
    """
    Error reading or parsing a configuration file.

    Raised for TOML parsing errors and unreadable files.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class ConfigValidationError(MuxopsConfigError, ValueError):
    """Invalid or missing configuration value."""

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        value: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if value is not None:
            ctx["value"] = value
        super().__init__(message, context=ctx, cause=cause)


class UnresolvedVariableError(MuxopsConfigError):
    """A variable was looked up that is unknown or could not be computed."""

    def __init__(
        self,
        name: str,
        *,
        message: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.name = name
        super().__init__(
            message or f"Unresolved variable: {name}",
            context={"name": name},
            cause=cause,
        )


# =============================================================================
# Task Graph Errors
# =============================================================================


class MuxopsTaskError(MuxopsException):
    """Base class for task registry and graph errors."""

    pass


class UnknownTaskError(MuxopsTaskError):
    """
    A task name does not exist in the registry.

    Raised both for user-requested names and for prerequisites that
    reference a task nobody registered.
    """

    exit_code: int = 2

    def __init__(self, name: str, *, required_by: str | None = None) -> None:
        self.name = name
        self.required_by = required_by
        if required_by:
            message = f"Unknown task '{name}' (required by '{required_by}')"
        else:
            message = f"Unknown task '{name}'"
        super().__init__(message)


class DuplicateTaskError(MuxopsTaskError):
    """Two tasks were registered under the same name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Task already registered: '{name}'")


class CyclicDependencyError(MuxopsTaskError):
    """A task appears as its own transitive prerequisite."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(f"Cyclic dependency: {' -> '.join(self.cycle)}")


class TaskFailedError(MuxopsTaskError):
    """
    A recipe step failed and aborted the invocation.

    Attributes:
        task: Name of the task whose step failed
        step_index: Zero-based index of the failing step in the recipe
        report: Partial run report (results of every task that ran)
    """

    def __init__(
        self,
        task: str,
        step_index: int,
        cause: Exception,
        *,
        report: RunReport | None = None,
    ) -> None:
        self.task = task
        self.step_index = step_index
        self.report = report
        super().__init__(
            f"Task '{task}' failed at step {step_index + 1}: {cause}",
            cause=cause,
        )

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        cause = self.__cause__
        if isinstance(cause, MuxopsException):
            return cause.exit_code
        return 1


class RunInterruptedError(MuxopsTaskError):
    """The user interrupted the invocation; nothing further was started."""

    exit_code = 130

    def __init__(self, task: str, *, report: RunReport | None = None) -> None:
        self.task = task
        self.report = report
        super().__init__(f"Interrupted before task '{task}' could finish")


# =============================================================================
# Execution Errors
# =============================================================================


class MuxopsExecutionError(MuxopsException):
    """Base class for external command execution errors."""

    pass


class ToolNotFoundError(MuxopsExecutionError):
    """The binary of an external command could not be resolved."""

    exit_code: int = 127

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Tool not found: {command}", context={"command": command})


class NonZeroExitError(MuxopsExecutionError):
    """An external command exited with a non-zero status."""

    def __init__(
        self,
        code: int,
        *,
        command: str,
        args: Sequence[str] = (),
        workdir: str | None = None,
    ) -> None:
        self.code = code
        self.command = command
        self.args_list = list(args)
        ctx: dict = {"exit_code": code}
        if workdir:
            ctx["workdir"] = workdir
        super().__init__(f"Command failed: {self.command_line}", context=ctx)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.code

    @property
    def command_line(self) -> str:
        return " ".join([self.command, *self.args_list])


class CodegenFailedError(MuxopsExecutionError):
    """The interface-definition compiler failed for a service."""

    def __init__(self, service: str, cause: Exception) -> None:
        self.service = service
        self.cause = cause
        super().__init__(
            f"Code generation failed for service '{service}': {cause}",
            context={"service": service},
            cause=cause,
        )

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        if isinstance(self.cause, MuxopsException):
            return self.cause.exit_code
        return 1
