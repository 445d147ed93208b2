"""
Python toolchain.

grpcio-tools (with mypy-protobuf stubs) for codegen, uv for dependencies
and pytest-cov for coverage.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ...core.interfaces.toolchain import CommandLine
from .base import BaseToolchain


class PythonToolchain(BaseToolchain):
    """Python services (e.g. the router and vector services)."""

    language = "python"
    display_name = "Python"
    deps_message = "Syncing Python packages..."
    test_message = "Running Pytest..."
    needs_package_marker = True
    raw_report_name = "coverage.tmp.xml"
    report_name = "coverage.xml"

    def codegen_command(
        self,
        variables,
        schema_dir: Path,
        out_dir: Path,
        schema_files: Sequence[Path],
    ) -> CommandLine:
        return CommandLine(
            command=variables.resolve("python"),
            args=(
                "-m",
                "grpc_tools.protoc",
                self.include_flag(schema_dir),
                f"--python_out={out_dir}",
                f"--grpc_python_out={out_dir}",
                f"--mypy_out={out_dir}",
                f"--mypy_grpc_out={out_dir}",
                *self.schema_args(schema_files),
            ),
        )

    def deps_commands(self, variables) -> list[CommandLine]:
        return [
            CommandLine(variables.resolve("uv"), ("sync", "--locked", "--all-extras", "--dev")),
        ]

    def test_command(self, variables, service, report_path: str) -> CommandLine:
        return CommandLine(
            variables.resolve("uv"),
            (
                "run",
                "pytest",
                "-v",
                f"--cov={service.coverage_source}",
                f"--cov-report=xml:{report_path}",
            ),
        )
