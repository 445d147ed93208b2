"""
Configuration inspection helpers for the `config` command.

Settings themselves live in muxops.core.settings.
"""

from __future__ import annotations

from typing import Any

from .core.settings import MuxopsSettings, load_settings

# Keys shown by `muxops config list`
CONFIGURABLE_KEYS: dict[str, dict[str, Any]] = {
    "project.proto_dir": {
        "type": str,
        "default": "proto",
        "description": "Directory holding the .proto files",
    },
    "project.gen_subdir": {
        "type": str,
        "default": "pb",
        "description": "Per-service directory receiving generated bindings",
    },
    "project.report_subdir": {
        "type": str,
        "default": "reports",
        "description": "Per-service directory receiving coverage reports",
    },
    "services": {
        "type": list,
        "default": "gateway (go), router (python), vector (python)",
        "description": "Services of the stack ([[services]] tables)",
    },
    "toolchain.protoc": {
        "type": str,
        "default": "protoc",
        "description": "Protocol buffer compiler",
    },
    "toolchain.python": {
        "type": str,
        "default": "python3",
        "description": "Interpreter used to run grpc_tools.protoc",
    },
    "toolchain.go": {
        "type": str,
        "default": "go",
        "description": "Go toolchain binary",
    },
    "toolchain.uv": {
        "type": str,
        "default": "uv",
        "description": "uv binary used for Python dependencies and tests",
    },
    "toolchain.gobin": {
        "type": str,
        "default": None,
        "description": "Install dir for protoc plugins (default: $(go env GOPATH)/bin)",
    },
    "compose.command": {
        "type": str,
        "default": "docker-compose",
        "description": "Container orchestrator binary",
    },
    "compose.file": {
        "type": str,
        "default": None,
        "description": "Compose file passed with -f (default: orchestrator's own lookup)",
    },
    "coverage.exclude": {
        "type": dict,
        "default": "go: /pb/, /cmd/, /testutil",
        "description": "Per-language patterns removed from coverage reports",
    },
    "execution.jobs": {
        "type": int,
        "default": 1,
        "description": "Maximum number of tasks running at once",
    },
    "logging.level": {
        "type": str,
        "default": "warning",
        "description": "Log level (debug, info, warning, error)",
    },
    "logging.console": {
        "type": bool,
        "default": False,
        "description": "Also log to stderr",
    },
    "logging.file": {
        "type": bool,
        "default": True,
        "description": "Also log to a rotating file",
    },
    "logging.path": {
        "type": str,
        "default": None,
        "description": "Log file location (default ~/.muxops/muxops.log)",
    },
}


def config_get(
    key: str,
    settings: MuxopsSettings | None = None,
    start_dir: str | None = None,
) -> Any:
    """Get a config value by dot-notation key, or None if unknown."""
    if settings is None:
        settings = load_settings(start_dir=start_dir)
    return settings.to_config().get(key)


def config_list() -> dict[str, dict[str, Any]]:
    """List all configurable keys with descriptions."""
    return CONFIGURABLE_KEYS
