"""
Shared pytest fixtures for muxops tests.

This module provides:
- RecordingExecutor: ICommandExecutor fake that records every command
- project: A temporary three-service project with a config file
- isolate_environment: Clean container state and no log file per test
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from muxops.core.bootstrap import reset
from muxops.core.exceptions import NonZeroExitError, ToolNotFoundError
from muxops.core.interfaces.executor import ICommandExecutor
from muxops.core.interfaces.presenter import IPresenter
from muxops.core.models.execution import ExecutionResult

CONFIG_TOML = """\
[project]
proto_dir = "proto"

[toolchain]
gobin = "gobin"

[[services]]
name = "gateway"
dir = "backend-gateway"
language = "go"

[[services]]
name = "router"
dir = "backend-router"
language = "python"

[[services]]
name = "vector"
dir = "backend-vector"
language = "python"
"""


@dataclass
class RecordedCall:
    command: str
    args: tuple[str, ...]
    workdir: str | None
    env: dict[str, str] = field(default_factory=dict)

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]


class RecordingExecutor(ICommandExecutor):
    """
    Fake executor that records commands instead of running them.

    Attributes:
        calls: Every run() call, in order
        failures: Exit codes keyed by "command arg0" (or "command")
        missing: Commands reported as not installed
        effects: Callbacks keyed like failures, run before returning
        outputs: capture() results keyed by "command arg0 ..."
    """

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self.failures: dict[str, int] = {}
        self.missing: set[str] = set()
        self.effects: dict[str, Callable[[RecordedCall], None]] = {}
        self.outputs: dict[str, str] = {}
        self.captured: list[RecordedCall] = []

    @staticmethod
    def _keys(command: str, args: Sequence[str]) -> list[str]:
        keys = [command]
        if args:
            keys.insert(0, f"{command} {args[0]}")
        return keys

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        workdir: Path | str | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> ExecutionResult:
        call = RecordedCall(
            command=command,
            args=tuple(args),
            workdir=str(workdir) if workdir is not None else None,
            env=dict(env_overrides or {}),
        )
        self.calls.append(call)

        if command in self.missing:
            raise ToolNotFoundError(command)
        for key in self._keys(command, args):
            if key in self.effects:
                self.effects[key](call)
                break
        for key in self._keys(command, args):
            if key in self.failures:
                raise NonZeroExitError(
                    self.failures[key], command=command, args=args, workdir=call.workdir
                )
        return ExecutionResult(command=command, args=call.args, workdir=call.workdir)

    def capture(
        self,
        command: str,
        args: Sequence[str] = (),
        workdir: Path | str | None = None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> str:
        self.captured.append(RecordedCall(command=command, args=tuple(args), workdir=None))
        if command in self.missing:
            raise ToolNotFoundError(command)
        return self.outputs.get(" ".join([command, *args]), "")

    def argvs(self) -> list[list[str]]:
        return [call.argv for call in self.calls]


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Start every test with an empty container and no log file."""
    for name in list(os.environ):
        if name.startswith("MUXOPS_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MUXOPS_LOGGING__FILE", "false")
    reset()
    yield
    reset()


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def presenter() -> MagicMock:
    """Presenter mock recording every call."""
    return MagicMock(spec=IPresenter)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Create a three-service project.

    Layout:
        .muxops/config.toml
        proto/chat.proto, proto/vector.proto
        backend-gateway/, backend-router/, backend-vector/
    """
    (tmp_path / ".muxops").mkdir()
    (tmp_path / ".muxops" / "config.toml").write_text(CONFIG_TOML)

    proto = tmp_path / "proto"
    proto.mkdir()
    (proto / "vector.proto").write_text('syntax = "proto3";\n')
    (proto / "chat.proto").write_text('syntax = "proto3";\n')

    for name in ("backend-gateway", "backend-router", "backend-vector"):
        (tmp_path / name).mkdir()
    return tmp_path
