"""
Task graph executor.

Resolves the prerequisite graph of the requested tasks depth-first and runs
every task exactly once, never before all of its prerequisites completed.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from ...core.exceptions import (
    CyclicDependencyError,
    MuxopsException,
    RunInterruptedError,
    TaskFailedError,
    UnknownTaskError,
)
from ...core.interfaces.logger import ILogger
from ...core.interfaces.presenter import IPresenter
from ...core.models.execution import RunReport, TaskResult
from ...core.models.task import Task
from ..execution.signal_handler import ProcessSignalHandler
from ..logging import task_scope
from .registry import TaskRegistry


class GraphExecutor:
    """
    Runs tasks from a registry in dependency order.

    Handles:
    - Depth-first resolution with cycle detection before anything runs
    - Memoized execution (shared prerequisites run once per invocation)
    - Abort on the first failing step
    - Optional concurrent execution of independent tasks

    Usage:
        executor = GraphExecutor(registry)
        report = executor.run("test")
    """

    def __init__(
        self,
        registry: TaskRegistry,
        jobs: int = 1,
        presenter: IPresenter | None = None,
        logger: ILogger | None = None,
        signal_handler: ProcessSignalHandler | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            registry: Tasks available to this run
            jobs: Maximum number of tasks running at once (1 = sequential)
            presenter: Presenter for progress output
            logger: Logger for internal diagnostics
            signal_handler: Interrupt source checked before every task and step
        """
        if jobs < 1:
            raise ValueError("jobs must be at least 1")
        self._registry = registry
        self._jobs = jobs
        self._presenter = presenter
        self._logger = logger
        self._signal_handler = signal_handler
        self._report_lock = threading.Lock()

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ...core.di import resolve_or_default
            from ..logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    @property
    def presenter(self) -> IPresenter:
        if self._presenter is None:
            from ...core.di import resolve_or_default
            from ...presenters.console import ConsolePresenter

            self._presenter = resolve_or_default(IPresenter, ConsolePresenter)  # type: ignore[type-abstract]
        return self._presenter

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def plan(self, *names: str, skip: Iterable[str] = ()) -> list[str]:
        """
        Compute the execution order for the requested tasks.

        Each task appears once, after all of its prerequisites. Prerequisites
        of skipped tasks are not pulled in by them.

        Raises:
            UnknownTaskError: If a requested task or a prerequisite is missing
            CyclicDependencyError: If the graph reachable from names has a cycle
        """
        # Validate the full reachable graph first so skipping never hides a cycle
        self._resolve(names, skip=frozenset())
        return self._resolve(names, skip=frozenset(skip))

    def _resolve(self, names: Iterable[str], skip: frozenset[str]) -> list[str]:
        order: list[str] = []
        done: set[str] = set()
        visiting: list[str] = []

        def visit(name: str, required_by: str | None) -> None:
            if name in done:
                return
            if name in visiting:
                raise CyclicDependencyError([*visiting[visiting.index(name):], name])
            if name not in self._registry:
                raise UnknownTaskError(name, required_by=required_by)

            visiting.append(name)
            if name not in skip:
                for prereq in self._registry.get(name).prerequisites:
                    visit(prereq, name)
            visiting.pop()
            done.add(name)
            order.append(name)

        for name in names:
            visit(name, None)
        return order

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run(self, *names: str, skip: Iterable[str] = ()) -> RunReport:
        """
        Run the requested tasks and everything they depend on.

        Args:
            *names: Task names in the order given by the user
            skip: Tasks treated as already satisfied

        Returns:
            RunReport listing every task in completion order

        Raises:
            UnknownTaskError: Before anything runs, for a missing task
            CyclicDependencyError: Before anything runs, for a cycle
            TaskFailedError: When a recipe step fails; carries the partial report
            RunInterruptedError: When a termination signal arrived mid-run
        """
        if not names:
            raise ValueError("No task requested")

        skip_set = frozenset(skip)
        unknown_skips = sorted(n for n in skip_set if n not in self._registry)
        if unknown_skips:
            raise UnknownTaskError(unknown_skips[0])

        order = self.plan(*names, skip=skip_set)
        self.logger.debug("Execution plan for %s: %s", list(names), order)

        report = RunReport(requested=list(names))
        if self._jobs == 1:
            for name in order:
                self._run_task(self._registry.get(name), report, skipped=name in skip_set)
        else:
            self._run_concurrently(order, report, skip_set)

        self.logger.info("Run finished: %s", report.executed)
        return report

    def _run_concurrently(
        self,
        order: list[str],
        report: RunReport,
        skip: frozenset[str],
    ) -> None:
        planned = set(order)
        waiting_on: dict[str, set[str]] = {
            name: set() if name in skip else set(self._registry.get(name).prerequisites) & planned
            for name in order
        }
        pending = list(order)
        completed: set[str] = set()
        running: dict[Future, str] = {}
        failure: BaseException | None = None

        with ThreadPoolExecutor(max_workers=self._jobs, thread_name_prefix="muxops") as pool:
            while pending or running:
                if failure is None:
                    for name in [n for n in pending if waiting_on[n] <= completed]:
                        pending.remove(name)
                        task = self._registry.get(name)
                        self.logger.debug("Scheduling %s", name)
                        running[pool.submit(self._run_task, task, report, name in skip)] = name

                if not running:
                    break

                finished, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in finished:
                    name = running.pop(future)
                    error = future.exception()
                    if error is None:
                        completed.add(name)
                    elif failure is None:
                        # Started siblings still finish; nothing new is scheduled
                        self.logger.debug("Task %s failed, draining %d running", name, len(running))
                        failure = error

        if failure is not None:
            raise failure

    def _run_task(self, task: Task, report: RunReport, skipped: bool = False) -> None:
        with task_scope(task.name):
            self._execute(task, report, skipped)

    def _execute(self, task: Task, report: RunReport, skipped: bool) -> None:
        self._check_interrupted(task, report)
        if skipped:
            self.logger.debug("Skipping %s", task.name)
            self._record(report, TaskResult(task=task.name, success=True, skipped=True))
            return

        self.logger.debug("Running %s (%d steps)", task.name, len(task.recipe))
        for index, step in enumerate(task.recipe):
            if index:
                self._check_interrupted(task, report)
            if step.label:
                self.presenter.print_step(step.label)
            try:
                step()
            except (MuxopsException, OSError) as e:
                self.logger.error("Task %s failed at step %d: %s", task.name, index, e)
                self._record(
                    report,
                    TaskResult(task=task.name, success=False, failed_step=index, error=str(e)),
                )
                raise TaskFailedError(task.name, index, e, report=report) from e

        if task.success_message:
            self.presenter.print_success(task.success_message)
        self._record(report, TaskResult(task=task.name, success=True))

    def _check_interrupted(self, task: Task, report: RunReport) -> None:
        if self._signal_handler is not None and self._signal_handler.is_interrupted():
            self.logger.info("Interrupted, not continuing with %s", task.name)
            raise RunInterruptedError(task.name, report=report)

    def _record(self, report: RunReport, result: TaskResult) -> None:
        with self._report_lock:
            report.add(result)

