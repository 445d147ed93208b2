"""
Configuration models.

Provides Pydantic models for muxops configuration with validation.
"""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator, model_validator

from .base import MuxopsBaseModel

# Type aliases
Language = Literal["go", "python"]
LogLevel = Literal["debug", "info", "warning", "error"]

# Coverage lines matching these patterns never reach the final report.
DEFAULT_COVERAGE_EXCLUDES: dict[str, list[str]] = {
    "go": ["/pb/", "/cmd/", "/testutil"],
    "python": [],
}


def check_patterns(patterns: list[str]) -> list[str]:
    """Reject exclusion patterns that are not valid regular expressions."""
    for pattern in patterns:
        try:
            re.compile(pattern.encode())
        except re.error as e:
            raise ValueError(f"invalid coverage exclude pattern {pattern!r}: {e}") from e
    return patterns


class ConfigBaseModel(MuxopsBaseModel):
    """Base model for config sections with relaxed strict mode for TOML loading."""

    model_config = ConfigDict(
        strict=False,  # Allow coercion from TOML types
        validate_assignment=True,
        extra="ignore",  # Ignore unknown fields in config files
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


class ProjectConfig(ConfigBaseModel):
    """Project layout section."""

    proto_dir: str = "proto"
    gen_subdir: str = "pb"
    report_subdir: str = "reports"


class ServiceConfig(ConfigBaseModel):
    """One entry of the [[services]] table."""

    name: str
    dir: str
    language: Language
    label: str | None = None
    coverage_source: str = "app"
    coverage_exclude: list[str] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Service names become task suffixes, so keep them simple."""
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("service name must be a non-empty word")
        return v

    @field_validator("coverage_exclude")
    @classmethod
    def validate_coverage_exclude(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else check_patterns(v)

    @property
    def display_name(self) -> str:
        return self.label or self.name.capitalize()


def default_services() -> list[ServiceConfig]:
    return [
        ServiceConfig(name="gateway", dir="backend-gateway", language="go"),
        ServiceConfig(name="router", dir="backend-router", language="python"),
        ServiceConfig(name="vector", dir="backend-vector", language="python"),
    ]


class ToolchainConfig(ConfigBaseModel):
    """External tool locations."""

    protoc: str = "protoc"
    python: str = "python3"
    go: str = "go"
    uv: str = "uv"
    gobin: str | None = None  # Derived from `go env GOPATH` when unset


class ComposeConfig(ConfigBaseModel):
    """Container runtime section."""

    command: str = "docker-compose"
    file: str | None = None


class CoverageConfig(ConfigBaseModel):
    """Coverage filtering section."""

    exclude: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_COVERAGE_EXCLUDES.items()}
    )

    @field_validator("exclude", mode="before")
    @classmethod
    def merge_defaults(cls, v: Any) -> dict[str, list[str]]:
        """Languages missing from the config keep their default patterns."""
        merged = {k: list(p) for k, p in DEFAULT_COVERAGE_EXCLUDES.items()}
        if isinstance(v, dict):
            merged.update(v)
        return merged

    @field_validator("exclude")
    @classmethod
    def validate_exclude(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        for patterns in v.values():
            check_patterns(patterns)
        return v

    def for_language(self, language: str) -> list[str]:
        return list(self.exclude.get(language, []))


class ExecutionConfig(ConfigBaseModel):
    """Task execution section."""

    jobs: int = Field(default=1, ge=1)


class LoggingConfig(ConfigBaseModel):
    """Logging configuration section."""

    level: LogLevel = "warning"
    console: bool = False
    file: bool = True
    path: str | None = None  # Defaults to ~/.muxops/muxops.log


class MuxopsConfig(ConfigBaseModel):
    """Complete muxops configuration.

    This model represents the full configuration with all sections.
    It can be loaded from TOML files or constructed programmatically.
    """

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    services: list[ServiceConfig] = Field(default_factory=default_services)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def check_unique_services(self) -> MuxopsConfig:
        seen: set[str] = set()
        for service in self.services:
            if service.name in seen:
                raise ValueError(f"duplicate service name: {service.name}")
            seen.add(service.name)
        return self

    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'compose.command')
            default: Default value if key not found

        Returns:
            Config value or default
        """
        parts = key.split(".")
        obj: Any = self
        for part in parts:
            if isinstance(obj, dict):
                if part not in obj:
                    return default
                obj = obj[part]
            elif hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        return obj

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
