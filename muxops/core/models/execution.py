"""
Execution result models.

Results exist only for the duration of one invocation and are never
persisted.
"""

from __future__ import annotations

from pydantic import Field

from .base import ImmutableModel, MuxopsBaseModel


class ExecutionResult(ImmutableModel):
    """Outcome of a single external command."""

    command: str = Field(description="Resolved command that was executed")
    args: tuple[str, ...] = Field(default=(), description="Arguments passed to the command")
    workdir: str | None = Field(default=None, description="Working directory of the child")
    exit_code: int = Field(default=0, description="Exit status of the child")

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class TaskResult(ImmutableModel):
    """Outcome of one task within an invocation."""

    task: str
    success: bool
    skipped: bool = False
    failed_step: int | None = Field(default=None, description="Zero-based failing step index")
    error: str | None = None


class RunReport(MuxopsBaseModel):
    """Ordered task results of one top-level invocation."""

    requested: list[str] = Field(default_factory=list)
    results: list[TaskResult] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def executed(self) -> list[str]:
        """Names of tasks whose recipe actually ran, in completion order."""
        return [r.task for r in self.results if not r.skipped]

    def add(self, result: TaskResult) -> None:
        self.results.append(result)
