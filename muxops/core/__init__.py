"""
Core infrastructure for muxops.

This module provides:
- ServiceContainer: DI container using dependency-injector
- Toolchain plugin registry with auto-discovery
- Application bootstrap for initialization
- Settings, variable resolution and the exception hierarchy
"""

from .bootstrap import bootstrap, is_initialized, reset
from .container import ServiceContainer, get_container, resolve, try_resolve
from .exceptions import (
    CodegenFailedError,
    ConfigFileError,
    ConfigValidationError,
    CyclicDependencyError,
    DuplicateTaskError,
    MuxopsConfigError,
    MuxopsException,
    MuxopsExecutionError,
    MuxopsTaskError,
    NonZeroExitError,
    RunInterruptedError,
    TaskFailedError,
    ToolNotFoundError,
    UnknownTaskError,
    UnresolvedVariableError,
)
from .registry import discover_plugins

__all__ = [
    "CodegenFailedError",
    "ConfigFileError",
    "ConfigValidationError",
    "CyclicDependencyError",
    "DuplicateTaskError",
    "MuxopsConfigError",
    "MuxopsException",
    "MuxopsExecutionError",
    "MuxopsTaskError",
    "NonZeroExitError",
    "RunInterruptedError",
    "ServiceContainer",
    "TaskFailedError",
    "ToolNotFoundError",
    "UnknownTaskError",
    "UnresolvedVariableError",
    "bootstrap",
    "discover_plugins",
    "get_container",
    "is_initialized",
    "reset",
    "resolve",
    "try_resolve",
]
