"""
Unit tests for ReportManager.

Tests coverage collection, report filtering and cleanup.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from muxops.core.exceptions import ConfigValidationError, NonZeroExitError, TaskFailedError
from muxops.core.models.service import ServiceDescriptor
from muxops.core.models.task import Step, Task
from muxops.core.variables import VariableResolver
from muxops.plugins.toolchains import GoToolchain, PythonToolchain
from muxops.services.lifecycle import ReportManager
from muxops.services.logging import NullLogger
from muxops.services.tasks import GraphExecutor, TaskRegistry

TOOLCHAINS = {"go": GoToolchain(), "python": PythonToolchain()}

RAW_GO_COVERAGE = b"""\
mode: atomic
github.com/muxllm/gateway/internal/router/router.go:12.2,14.3 2 1
github.com/muxllm/gateway/pb/chat.pb.go:40.1,41.2 1 0
github.com/muxllm/gateway/cmd/server/main.go:10.1,20.2 5 0
github.com/muxllm/gateway/internal/testutil/fake.go:3.1,4.2 1 1
github.com/muxllm/gateway/internal/handler/chat.go:8.2,9.3 1 1
"""


def descriptor(root: Path, name: str, language: str, exclude=()) -> ServiceDescriptor:
    service_root = root / f"backend-{name}"
    return ServiceDescriptor(
        name=name,
        label=name.capitalize(),
        root=service_root,
        language=language,
        gen_dir=service_root / "pb",
        report_dir=service_root / "reports",
        coverage_exclude=tuple(exclude),
    )


@pytest.fixture
def variables():
    return VariableResolver({"go": "go", "uv": "uv"})


def make_manager(executor, variables, services=()):
    return ReportManager(
        executor,
        variables,
        services,
        toolchain_for=TOOLCHAINS.__getitem__,
        logger=NullLogger(),
    )


class TestFilterReport:
    """Tests for line filtering."""

    def test_drops_matching_lines_and_keeps_order(self, tmp_path, executor, variables):
        raw = tmp_path / "coverage.tmp"
        final = tmp_path / "coverage.txt"
        raw.write_bytes(RAW_GO_COVERAGE)

        dropped = make_manager(executor, variables).filter_report(
            raw, final, ["/pb/", "/cmd/", "/testutil"]
        )

        assert dropped == 3
        assert final.read_bytes() == (
            b"mode: atomic\n"
            b"github.com/muxllm/gateway/internal/router/router.go:12.2,14.3 2 1\n"
            b"github.com/muxllm/gateway/internal/handler/chat.go:8.2,9.3 1 1\n"
        )

    def test_no_patterns_copies_verbatim(self, tmp_path, executor, variables):
        raw = tmp_path / "raw"
        final = tmp_path / "final"
        raw.write_bytes(b"a\r\nb\nc")

        make_manager(executor, variables).filter_report(raw, final, [])

        assert final.read_bytes() == b"a\r\nb\nc"

    def test_patterns_are_regular_expressions(self, tmp_path, executor, variables):
        raw = tmp_path / "raw"
        final = tmp_path / "final"
        raw.write_bytes(b"keep.go\nmock_client.go\nmock_server.go\n")

        make_manager(executor, variables).filter_report(raw, final, [r"mock_\w+\.go"])

        assert final.read_bytes() == b"keep.go\n"

    def test_invalid_pattern_is_config_error(self, tmp_path, executor, variables):
        raw = tmp_path / "raw"
        raw.write_bytes(b"line\n")

        with pytest.raises(ConfigValidationError, match="Invalid coverage exclude pattern"):
            make_manager(executor, variables).filter_report(raw, tmp_path / "final", ["["])

        assert not (tmp_path / "final").exists()

    def test_invalid_pattern_fails_the_task(self, tmp_path, executor, variables):
        raw = tmp_path / "raw"
        raw.write_bytes(b"line\n")
        manager = make_manager(executor, variables)
        registry = TaskRegistry()
        registry.register(
            Task("filter", recipe=[Step(lambda: manager.filter_report(raw, tmp_path / "f", ["["]))])
        )

        with pytest.raises(TaskFailedError) as exc_info:
            GraphExecutor(registry, presenter=MagicMock(), logger=NullLogger()).run("filter")

        assert isinstance(exc_info.value.__cause__, ConfigValidationError)


class TestCollectCoverage:
    """Tests for running tests and producing the final report."""

    def test_go_raw_report_filtered_then_removed(self, tmp_path, executor, variables):
        service = descriptor(tmp_path, "gateway", "go", exclude=["/pb/", "/cmd/", "/testutil"])
        service.root.mkdir()

        def write_raw(call):
            (Path(call.workdir) / "reports" / "coverage.tmp").write_bytes(RAW_GO_COVERAGE)

        executor.effects["go test"] = write_raw

        final = make_manager(executor, variables).collect_coverage(service)

        assert executor.argvs() == [
            [
                "go",
                "test",
                "./...",
                "-v",
                "-count=1",
                "-coverpkg=./...",
                "-coverprofile=reports/coverage.tmp",
                "-covermode=atomic",
            ]
        ]
        assert executor.calls[0].workdir == str(service.root)
        assert final == service.report_dir / "coverage.txt"
        assert b"/pb/" not in final.read_bytes()
        assert not (service.report_dir / "coverage.tmp").exists()

    def test_python_report_written_directly(self, tmp_path, executor, variables):
        service = descriptor(tmp_path, "router", "python")
        service.root.mkdir()

        final = make_manager(executor, variables).collect_coverage(service)

        assert executor.argvs() == [
            ["uv", "run", "pytest", "-v", "--cov=app", "--cov-report=xml:reports/coverage.xml"]
        ]
        assert final == service.report_dir / "coverage.xml"
        assert service.report_dir.is_dir()

    def test_failed_tests_keep_raw_report(self, tmp_path, executor, variables):
        service = descriptor(tmp_path, "gateway", "go", exclude=["/pb/"])
        service.root.mkdir()
        executor.effects["go test"] = lambda call: (
            Path(call.workdir) / "reports" / "coverage.tmp"
        ).write_bytes(RAW_GO_COVERAGE)
        executor.failures["go test"] = 1

        with pytest.raises(NonZeroExitError):
            make_manager(executor, variables).collect_coverage(service)

        assert (service.report_dir / "coverage.tmp").exists()
        assert not (service.report_dir / "coverage.txt").exists()


class TestClean:
    """Tests for cleanup."""

    def test_clean_removes_generated_and_report_dirs(self, tmp_path, executor, variables):
        services = [descriptor(tmp_path, "gateway", "go"), descriptor(tmp_path, "router", "python")]
        for service in services:
            (service.gen_dir / "nested").mkdir(parents=True)
            (service.gen_dir / "nested" / "chat.pb.go").write_text("package pb\n")
            service.report_dir.mkdir()
            (service.root / "main.go").write_text("package main\n")

        make_manager(executor, variables, services).clean()

        for service in services:
            assert not service.gen_dir.exists()
            assert not service.report_dir.exists()
            assert (service.root / "main.go").exists()

    def test_clean_twice_is_noop(self, tmp_path, executor, variables):
        services = [descriptor(tmp_path, "vector", "python")]
        services[0].gen_dir.mkdir(parents=True)
        manager = make_manager(executor, variables, services)

        manager.clean()
        manager.clean()

        assert not services[0].gen_dir.exists()

    def test_clean_reports_keeps_generated_code(self, tmp_path, executor, variables):
        service = descriptor(tmp_path, "router", "python")
        service.gen_dir.mkdir(parents=True)
        service.report_dir.mkdir()

        make_manager(executor, variables, [service]).clean_reports()

        assert service.gen_dir.exists()
        assert not service.report_dir.exists()
