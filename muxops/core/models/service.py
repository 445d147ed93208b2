"""
Service descriptor model.

A service descriptor parameterizes the per-service operations (code
generation, dependency installation, tests, cleanup) that are otherwise
identical across services.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from .base import ImmutableModel
from .config import Language, ProjectConfig, ServiceConfig


class ServiceDescriptor(ImmutableModel):
    """Resolved, immutable view of one service of the stack."""

    name: str = Field(description="Service identity, e.g. 'gateway'")
    label: str = Field(description="Display name used in progress output")
    root: Path = Field(description="Service root directory")
    language: Language = Field(description="Target language of the service")
    gen_dir: Path = Field(description="Directory receiving generated bindings")
    report_dir: Path = Field(description="Directory receiving test reports")
    coverage_source: str = Field(default="app", description="Package measured by coverage")
    coverage_exclude: tuple[str, ...] = Field(
        default=(), description="Patterns removed from the final coverage report"
    )

    @classmethod
    def from_config(
        cls,
        service: ServiceConfig,
        project: ProjectConfig,
        project_root: Path,
        default_excludes: list[str],
    ) -> ServiceDescriptor:
        """Build a descriptor from its config entry, resolving paths against the project root."""
        root = project_root / service.dir
        excludes = (
            service.coverage_exclude if service.coverage_exclude is not None else default_excludes
        )
        return cls(
            name=service.name,
            label=service.display_name,
            root=root,
            language=service.language,
            gen_dir=root / project.gen_subdir,
            report_dir=root / project.report_subdir,
            coverage_source=service.coverage_source,
            coverage_exclude=tuple(excludes),
        )
