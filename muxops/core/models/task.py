"""
Task and recipe step definitions.

Tasks are declared once at process start and never change during a run,
so both are frozen dataclasses rather than validated models: a recipe step
holds an arbitrary callable.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Step:
    """One executable step of a task recipe.

    Attributes:
        action: Zero-argument callable; raising aborts the task
        label: Progress line shown before the step runs (empty for silent steps)
    """

    action: Callable[[], Any]
    label: str = ""

    def __call__(self) -> Any:
        return self.action()


@dataclass(frozen=True)
class Task:
    """A named unit of work with ordered prerequisites and a recipe.

    Attributes:
        name: Unique task name
        description: One-line help text; tasks without one are internal
        prerequisites: Names of tasks that must complete first, in order
        recipe: Steps executed in order once all prerequisites are done
        success_message: Shown after the recipe completes
    """

    name: str
    description: str | None = None
    prerequisites: tuple[str, ...] = ()
    recipe: tuple[Step, ...] = field(default_factory=tuple)
    success_message: str | None = None

    def __post_init__(self) -> None:
        if not self.name or any(ch.isspace() for ch in self.name):
            raise ValueError(f"Invalid task name: {self.name!r}")
        # Accept lists from callers but store tuples so the task stays hashable
        object.__setattr__(self, "prerequisites", tuple(self.prerequisites))
        object.__setattr__(self, "recipe", tuple(self.recipe))

    @property
    def is_internal(self) -> bool:
        return not self.description
