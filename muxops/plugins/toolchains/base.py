"""
Base toolchain.

Shared helpers for toolchain plugins.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ...core.interfaces.toolchain import IToolchain


class BaseToolchain(IToolchain):
    """
    Abstract base class for toolchains.

    Implements the Strategy pattern: the codegen coordinator, the catalog
    and the report manager only ever talk to IToolchain.
    """

    needs_package_marker = False
    raw_report_name = "coverage.tmp"
    report_name = "coverage.txt"

    def tool_commands(self, variables) -> list:
        """Most toolchains need no extra compiler plugins."""
        return []

    @staticmethod
    def include_flag(schema_dir: Path) -> str:
        return f"-I={schema_dir}"

    @staticmethod
    def schema_args(schema_files: Sequence[Path]) -> tuple[str, ...]:
        return tuple(str(path) for path in schema_files)
