"""
Pydantic models for muxops.

Configuration sections, service descriptors, task definitions and
execution results.
"""

from .base import ImmutableModel, MuxopsBaseModel
from .config import (
    DEFAULT_COVERAGE_EXCLUDES,
    ComposeConfig,
    CoverageConfig,
    ExecutionConfig,
    LoggingConfig,
    MuxopsConfig,
    ProjectConfig,
    ServiceConfig,
    ToolchainConfig,
)
from .execution import ExecutionResult, RunReport, TaskResult
from .service import ServiceDescriptor
from .task import Step, Task

__all__ = [
    "DEFAULT_COVERAGE_EXCLUDES",
    "ComposeConfig",
    "CoverageConfig",
    "ExecutionConfig",
    "ExecutionResult",
    "ImmutableModel",
    "LoggingConfig",
    "MuxopsBaseModel",
    "MuxopsConfig",
    "ProjectConfig",
    "RunReport",
    "ServiceConfig",
    "ServiceDescriptor",
    "Step",
    "Task",
    "TaskResult",
    "ToolchainConfig",
]
