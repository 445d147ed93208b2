"""
Unit tests for GraphExecutor.

Tests dependency ordering, memoization, failure propagation, skipping and
concurrent execution of independent tasks.
"""

import threading
from unittest.mock import MagicMock

import pytest

from muxops.core.exceptions import (
    CyclicDependencyError,
    NonZeroExitError,
    TaskFailedError,
    UnknownTaskError,
)
from muxops.core.interfaces.presenter import IPresenter
from muxops.core.models.task import Step, Task
from muxops.services.logging import NullLogger
from muxops.services.tasks import GraphExecutor, TaskRegistry


def recording_task(name, log, prerequisites=(), description=None, **kwargs):
    """Task whose single step appends its name to log."""
    return Task(
        name,
        description=description,
        prerequisites=prerequisites,
        recipe=[Step(lambda: log.append(name))],
        **kwargs,
    )


def failing_step(code=2):
    def fail():
        raise NonZeroExitError(code, command="go", args=["test", "./..."])

    return Step(fail)


@pytest.fixture
def presenter():
    return MagicMock(spec=IPresenter)


def make_executor(tasks, presenter, jobs=1):
    return GraphExecutor(TaskRegistry(tasks), jobs=jobs, presenter=presenter, logger=NullLogger())


class TestOrdering:
    """Tests for prerequisite ordering and memoization."""

    def test_shared_prerequisite_runs_once(self, presenter):
        """c depends on a and b, b depends on a: order is a, b, c."""
        log = []
        executor = make_executor(
            [
                recording_task("a", log),
                recording_task("b", log, prerequisites=["a"]),
                recording_task("c", log, prerequisites=["a", "b"]),
            ],
            presenter,
        )

        report = executor.run("c")

        assert log == ["a", "b", "c"]
        assert report.executed == ["a", "b", "c"]
        assert report.success

    def test_prerequisites_run_in_declared_order(self, presenter):
        log = []
        executor = make_executor(
            [
                recording_task("deps-gateway", log),
                recording_task("deps-router", log),
                recording_task("deps-vector", log),
                Task("deps", prerequisites=["deps-gateway", "deps-router", "deps-vector"]),
            ],
            presenter,
        )

        executor.run("deps")

        assert log == ["deps-gateway", "deps-router", "deps-vector"]

    def test_multiple_requested_tasks_share_memoization(self, presenter):
        """Two top-level names with a common prerequisite still run it once."""
        log = []
        executor = make_executor(
            [
                recording_task("gen", log),
                recording_task("deps", log, prerequisites=["gen"]),
                recording_task("test", log, prerequisites=["gen"]),
            ],
            presenter,
        )

        executor.run("deps", "test")

        assert log == ["gen", "deps", "test"]

    def test_steps_run_in_order(self, presenter):
        log = []
        task = Task("t", recipe=[Step(lambda i=i: log.append(i)) for i in range(4)])

        make_executor([task], presenter).run("t")

        assert log == [0, 1, 2, 3]

    def test_task_without_recipe_completes(self, presenter):
        report = make_executor([Task("noop", description="nothing")], presenter).run("noop")

        assert report.executed == ["noop"]

    def test_step_labels_and_success_message_are_presented(self, presenter):
        task = Task(
            "clean",
            recipe=[Step(lambda: None, "Cleaning generated protos...")],
            success_message="Cleanup completed.",
        )

        make_executor([task], presenter).run("clean")

        presenter.print_step.assert_called_once_with("Cleaning generated protos...")
        presenter.print_success.assert_called_once_with("Cleanup completed.")

    def test_plan_does_not_run_anything(self, presenter):
        log = []
        executor = make_executor(
            [recording_task("a", log), recording_task("b", log, prerequisites=["a"])],
            presenter,
        )

        assert executor.plan("b") == ["a", "b"]
        assert log == []


class TestValidationBeforeExecution:
    """Errors in the graph surface before any step runs."""

    def test_unknown_requested_task(self, presenter):
        log = []
        executor = make_executor([recording_task("a", log)], presenter)

        with pytest.raises(UnknownTaskError, match="nope"):
            executor.run("a", "nope")

        assert log == []

    def test_unknown_prerequisite(self, presenter):
        log = []
        executor = make_executor(
            [recording_task("a", log), recording_task("b", log, prerequisites=["a", "missing"])],
            presenter,
        )

        with pytest.raises(UnknownTaskError) as exc_info:
            executor.run("b")

        assert exc_info.value.name == "missing"
        assert log == []

    def test_cycle_reported_before_any_step(self, presenter):
        log = []
        executor = make_executor(
            [
                recording_task("start", log),
                recording_task("a", log, prerequisites=["start", "b"]),
                recording_task("b", log, prerequisites=["a"]),
            ],
            presenter,
        )

        with pytest.raises(CyclicDependencyError):
            executor.run("a")

        assert log == []

    def test_no_task_requested(self, presenter):
        with pytest.raises(ValueError):
            make_executor([], presenter).run()

    def test_invalid_job_count(self, presenter):
        with pytest.raises(ValueError):
            GraphExecutor(TaskRegistry(), jobs=0, presenter=presenter)


class TestFailure:
    """Tests for failure propagation."""

    def test_failure_aborts_dependents(self, presenter):
        """b fails at its second step: c never starts and b's third step never runs."""
        log = []
        b = Task(
            "b",
            prerequisites=["a"],
            recipe=[
                Step(lambda: log.append("b0")),
                failing_step(code=2),
                Step(lambda: log.append("b2")),
            ],
        )
        executor = make_executor(
            [recording_task("a", log), b, recording_task("c", log, prerequisites=["b"])],
            presenter,
        )

        with pytest.raises(TaskFailedError) as exc_info:
            executor.run("c")

        error = exc_info.value
        assert error.task == "b"
        assert error.step_index == 1
        assert error.exit_code == 2
        assert isinstance(error.__cause__, NonZeroExitError)
        assert log == ["a", "b0"]

    def test_failure_report_lists_completed_tasks(self, presenter):
        log = []
        executor = make_executor(
            [
                recording_task("a", log),
                Task("b", prerequisites=["a"], recipe=[failing_step()]),
            ],
            presenter,
        )

        with pytest.raises(TaskFailedError) as exc_info:
            executor.run("b")

        report = exc_info.value.report
        assert report is not None
        assert [r.task for r in report.results] == ["a", "b"]
        assert report.results[1].success is False
        assert report.results[1].failed_step == 0
        assert not report.success

    def test_no_success_message_after_failure(self, presenter):
        task = Task("t", recipe=[failing_step()], success_message="done")

        with pytest.raises(TaskFailedError):
            make_executor([task], presenter).run("t")

        presenter.print_success.assert_not_called()

    def test_os_error_in_step_fails_task(self, presenter):
        def boom():
            raise PermissionError("read-only file system")

        with pytest.raises(TaskFailedError) as exc_info:
            make_executor([Task("t", recipe=[Step(boom)])], presenter).run("t")

        assert exc_info.value.exit_code == 1


class TestSkip:
    """Tests for explicitly skipped tasks."""

    def test_skipped_task_does_not_run_or_pull_prerequisites(self, presenter):
        log = []
        executor = make_executor(
            [
                recording_task("down", log),
                recording_task("up", log),
                recording_task("restart", log, prerequisites=["down", "up"]),
            ],
            presenter,
        )

        report = executor.run("restart", skip=["down"])

        assert log == ["up", "restart"]
        assert report.executed == ["up", "restart"]
        assert [r.task for r in report.results if r.skipped] == ["down"]

    def test_unknown_skip_name(self, presenter):
        log = []
        executor = make_executor([recording_task("a", log)], presenter)

        with pytest.raises(UnknownTaskError):
            executor.run("a", skip=["nope"])

        assert log == []


class TestConcurrency:
    """Tests for jobs > 1."""

    def test_independent_tasks_overlap(self, presenter):
        """Two independent tasks are running at the same time."""
        both_started = threading.Barrier(2, timeout=5)
        log = []

        def step(name):
            def action():
                both_started.wait()
                log.append(name)

            return Step(action)

        executor = make_executor(
            [
                Task("deps-router", recipe=[step("router")]),
                Task("deps-vector", recipe=[step("vector")]),
                Task("deps", prerequisites=["deps-router", "deps-vector"]),
            ],
            presenter,
            jobs=2,
        )

        report = executor.run("deps")

        assert sorted(log) == ["router", "vector"]
        assert report.executed[-1] == "deps"

    def test_dependents_wait_for_prerequisites(self, presenter):
        log = []
        lock = threading.Lock()

        def record(name):
            def action():
                with lock:
                    log.append(name)

            return Step(action)

        executor = make_executor(
            [
                Task("gen", recipe=[record("gen")]),
                Task("a", prerequisites=["gen"], recipe=[record("a")]),
                Task("b", prerequisites=["gen"], recipe=[record("b")]),
                Task("all", prerequisites=["a", "b"], recipe=[record("all")]),
            ],
            presenter,
            jobs=4,
        )

        executor.run("all")

        assert log[0] == "gen"
        assert log[-1] == "all"
        assert sorted(log[1:3]) == ["a", "b"]

    def test_failure_waits_for_running_siblings(self, presenter):
        """A failing task does not interrupt its sibling, but the run still fails."""
        sibling_started = threading.Event()
        sibling_finished = threading.Event()

        def slow():
            sibling_started.set()
            # Long enough for the failure to be observed first
            sibling_finished.wait(0.2)
            sibling_finished.set()

        def fail_after_sibling_started():
            sibling_started.wait(5)
            raise NonZeroExitError(1, command="uv", args=["sync"])

        log = []
        executor = make_executor(
            [
                Task("slow", recipe=[Step(slow)]),
                Task("broken", recipe=[Step(fail_after_sibling_started)]),
                Task(
                    "all",
                    prerequisites=["slow", "broken"],
                    recipe=[Step(lambda: log.append("all"))],
                ),
            ],
            presenter,
            jobs=2,
        )

        with pytest.raises(TaskFailedError) as exc_info:
            executor.run("all")

        assert exc_info.value.task == "broken"
        assert sibling_finished.is_set()
        assert log == []
        names = [r.task for r in exc_info.value.report.results]
        assert sorted(names) == ["broken", "slow"]
