"""
Task registry.

Holds the static task declarations of a run. Registration happens once at
process start; the registry is read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator

from ...core.exceptions import CyclicDependencyError, DuplicateTaskError, UnknownTaskError
from ...core.models.task import Task


class TaskRegistry:
    """Named tasks with their prerequisites."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._tasks: dict[str, Task] = {}
        for task in tasks or []:
            self.register(task)

    def register(self, task: Task) -> Task:
        """
        Add a task.

        Raises:
            DuplicateTaskError: If a task with the same name exists
        """
        if task.name in self._tasks:
            raise DuplicateTaskError(task.name)
        self._tasks[task.name] = task
        return task

    def get(self, name: str) -> Task:
        """
        Look up a task by name.

        Raises:
            UnknownTaskError: If no such task is registered
        """
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def names(self) -> list[str]:
        return sorted(self._tasks)

    def list(self) -> list[tuple[str, str]]:
        """(name, description) of every described task, ordered by name."""
        return sorted(
            (task.name, task.description) for task in self._tasks.values() if task.description
        )

    def validate(self) -> None:
        """
        Check every prerequisite edge of the graph.

        Raises:
            UnknownTaskError: If a prerequisite names a missing task
            CyclicDependencyError: If any task depends on itself transitively
        """
        # 0 = unvisited, 1 = on the current path, 2 = done
        state: dict[str, int] = {}

        for root in self.names():
            if state.get(root) == 2:
                continue
            path: list[str] = [root]
            state[root] = 1
            stack: list[Iterator[str]] = [iter(self._tasks[root].prerequisites)]
            while stack:
                prereq = next(stack[-1], None)
                if prereq is None:
                    stack.pop()
                    state[path.pop()] = 2
                    continue
                if prereq not in self._tasks:
                    raise UnknownTaskError(prereq, required_by=path[-1])
                if state.get(prereq) == 1:
                    raise CyclicDependencyError([*path[path.index(prereq):], prereq])
                if state.get(prereq) == 2:
                    continue
                state[prereq] = 1
                path.append(prereq)
                stack.append(iter(self._tasks[prereq].prerequisites))
