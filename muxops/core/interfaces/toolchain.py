"""
Toolchain interface.

A toolchain knows how one target language compiles interface definitions,
installs dependencies, runs tests with coverage and installs its compiler
plugins. Toolchains only build command lines; running them is the
executor's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.service import ServiceDescriptor
    from ..variables import VariableResolver


@dataclass(frozen=True)
class CommandLine:
    """A command ready to hand to the executor."""

    command: str
    args: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return " ".join([self.command, *self.args])


class IToolchain(ABC):
    """Interface for per-language toolchains."""

    # Progress text for the dependency and test steps
    deps_message: str = "Installing dependencies..."
    test_message: str = "Running tests..."

    @property
    @abstractmethod
    def language(self) -> str:
        """Language identifier matching ServiceConfig.language."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable language name (e.g. 'Go')."""
        pass

    @property
    @abstractmethod
    def needs_package_marker(self) -> bool:
        """Whether generated output must contain an __init__.py."""
        pass

    @property
    @abstractmethod
    def raw_report_name(self) -> str:
        """File name of the unfiltered coverage report."""
        pass

    @property
    @abstractmethod
    def report_name(self) -> str:
        """File name of the final coverage report."""
        pass

    @abstractmethod
    def codegen_command(
        self,
        variables: VariableResolver,
        schema_dir: Path,
        out_dir: Path,
        schema_files: Sequence[Path],
    ) -> CommandLine:
        """Build the compiler invocation for one service."""
        pass

    @abstractmethod
    def deps_commands(self, variables: VariableResolver) -> list[CommandLine]:
        """Commands installing the service's dependencies, run in its root."""
        pass

    @abstractmethod
    def test_command(
        self,
        variables: VariableResolver,
        service: ServiceDescriptor,
        report_path: str,
    ) -> CommandLine:
        """Command running the test suite and writing coverage to report_path."""
        pass

    @abstractmethod
    def tool_commands(self, variables: VariableResolver) -> list[CommandLine]:
        """Commands installing compiler plugins (may be empty)."""
        pass
