"""
Report manager.

Runs each service's test suite with coverage, filters generated code out
of the report, and cleans generated and report directories.
"""

from __future__ import annotations

import re
import shutil
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from ...core.exceptions import ConfigValidationError
from ...core.interfaces.executor import ICommandExecutor
from ...core.interfaces.logger import ILogger
from ...core.interfaces.toolchain import IToolchain
from ...core.models.service import ServiceDescriptor
from ...core.variables import VariableResolver


def _container_toolchain(language: str) -> IToolchain:
    from ...core.container import get_container

    return get_container().get_toolchain(language)


def _relative_to(path: Path, root: Path) -> Path:
    # Test tools run in the service root and get paths relative to it
    return path.relative_to(root) if path.is_relative_to(root) else path


class ReportManager:
    """
    Collects coverage reports and removes build artifacts.

    Usage:
        reports = ReportManager(executor, variables, services)
        reports.collect_coverage(services[0])
        reports.clean()
    """

    def __init__(
        self,
        executor: ICommandExecutor,
        variables: VariableResolver,
        services: Iterable[ServiceDescriptor],
        toolchain_for: Callable[[str], IToolchain] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._executor = executor
        self._variables = variables
        self._services = list(services)
        self._toolchain_for = toolchain_for or _container_toolchain
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ...core.di import resolve_or_default
            from ..logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    # -------------------------------------------------------------------------
    # Coverage
    # -------------------------------------------------------------------------

    def report_path(self, service: ServiceDescriptor) -> Path:
        """Location of the final coverage report for a service."""
        return service.report_dir / self._toolchain_for(service.language).report_name

    def collect_coverage(self, service: ServiceDescriptor) -> Path:
        """
        Run the service's tests and produce its final coverage report.

        Returns:
            Path of the final report

        Raises:
            NonZeroExitError: If the test suite fails (the raw report is kept)
        """
        toolchain = self._toolchain_for(service.language)
        service.report_dir.mkdir(parents=True, exist_ok=True)

        final = service.report_dir / toolchain.report_name
        name = toolchain.raw_report_name if service.coverage_exclude else toolchain.report_name
        target = _relative_to(service.report_dir / name, service.root)

        line = toolchain.test_command(self._variables, service, str(target))
        self.logger.info("Running %s tests for %s", toolchain.display_name, service.name)
        self._executor.run(
            line.command, line.args, workdir=service.root, env_overrides=line.env or None
        )

        if service.coverage_exclude:
            raw = service.report_dir / toolchain.raw_report_name
            self.filter_report(raw, final, service.coverage_exclude)
            raw.unlink()
        return final

    def filter_report(self, raw: Path, final: Path, patterns: Sequence[str]) -> int:
        """
        Copy raw to final, dropping every line that matches any pattern.

        Patterns are regular expressions searched anywhere in the line.
        Kept lines are written byte for byte in their original order.

        Returns:
            Number of lines dropped

        Raises:
            ConfigValidationError: If a pattern is not a valid regular expression
        """
        try:
            compiled = [re.compile(p.encode()) for p in patterns]
        except re.error as e:
            raise ConfigValidationError(
                f"Invalid coverage exclude pattern: {e}", key="coverage_exclude", cause=e
            ) from e
        dropped = 0
        kept: list[bytes] = []
        for line in Path(raw).read_bytes().splitlines(keepends=True):
            if any(rx.search(line) for rx in compiled):
                dropped += 1
            else:
                kept.append(line)
        Path(final).write_bytes(b"".join(kept))
        self.logger.debug("Filtered %s -> %s (%d lines dropped)", raw, final, dropped)
        return dropped

    # -------------------------------------------------------------------------
    # Cleanup
    # -------------------------------------------------------------------------

    def clean_generated(self) -> None:
        """Remove every service's generated bindings."""
        for service in self._services:
            self._remove(service.gen_dir)

    def clean_reports(self) -> None:
        """Remove every service's report directory."""
        for service in self._services:
            self._remove(service.report_dir)

    def clean(self) -> None:
        self.clean_generated()
        self.clean_reports()

    def _remove(self, path: Path) -> None:
        if path.exists():
            shutil.rmtree(path)
            self.logger.debug("Removed %s", path)
