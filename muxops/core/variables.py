"""
Variable resolver.

Maps symbolic names (project paths, tool locations) to resolved values.
Static values are fixed at construction; derived values are computed on
first lookup and cached for the lifetime of the run.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import MuxopsException, UnresolvedVariableError
from .interfaces.logger import ILogger

if TYPE_CHECKING:
    from .interfaces.executor import ICommandExecutor
    from .settings import MuxopsSettings


class VariableResolver:
    """
    Read-only lookup of resolved configuration values.

    Usage:
        variables = VariableResolver({"proto_dir": "/repo/proto"},
                                     derived={"gobin": discover_gobin})
        variables.resolve("gobin")  # computed once, then cached
    """

    def __init__(
        self,
        values: Mapping[str, str],
        derived: Mapping[str, Callable[[], str]] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._values: dict[str, str] = dict(values)
        self._derived: dict[str, Callable[[], str]] = dict(derived or {})
        self._lock = threading.Lock()
        self._logger = logger

        overlap = set(self._values) & set(self._derived)
        if overlap:
            raise ValueError(f"Variables defined twice: {', '.join(sorted(overlap))}")

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ..services.logging import NullLogger
            from .di import resolve_or_default

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    def resolve(self, name: str) -> str:
        """
        Look up a variable.

        Raises:
            UnresolvedVariableError: If the name is unknown or its discovery failed
        """
        if name in self._values:
            return self._values[name]

        with self._lock:
            # Another thread may have computed it while we waited
            if name in self._values:
                return self._values[name]

            compute = self._derived.get(name)
            if compute is None:
                raise UnresolvedVariableError(name)

            self.logger.debug("Computing derived variable: %s", name)
            try:
                value = compute()
            except MuxopsException as e:
                raise UnresolvedVariableError(
                    name, message=f"Could not compute variable '{name}': {e}", cause=e
                ) from e

            self._values[name] = value
            del self._derived[name]
            self.logger.debug("Resolved %s=%s", name, value)
            return value

    def __getitem__(self, name: str) -> str:
        return self.resolve(name)

    def __contains__(self, name: object) -> bool:
        return name in self._values or name in self._derived

    def names(self) -> list[str]:
        """All known variable names, computed or not."""
        return sorted({*self._values, *self._derived})

    def as_mapping(self) -> Mapping[str, str]:
        """Read-only view of the values computed so far."""
        return MappingProxyType(self._values)

    @classmethod
    def from_settings(
        cls,
        settings: MuxopsSettings,
        executor: ICommandExecutor,
        logger: ILogger | None = None,
    ) -> VariableResolver:
        """
        Build the resolver used by the task catalog.

        Paths are absolute, resolved against the project root. `gobin` is
        taken from config when set, otherwise discovered via `go env GOPATH`.
        """
        root = settings.project_root
        values: dict[str, str] = {
            "project_root": str(root),
            "proto_dir": str(root / settings.project.proto_dir),
            "gen_subdir": settings.project.gen_subdir,
            "report_subdir": settings.project.report_subdir,
            "protoc": settings.toolchain.protoc,
            "python": settings.toolchain.python,
            "go": settings.toolchain.go,
            "uv": settings.toolchain.uv,
            "compose": settings.compose.command,
        }
        if settings.compose.file:
            values["compose_file"] = str(root / settings.compose.file)
        for service in settings.services:
            values[f"{service.name}_dir"] = str(root / service.dir)

        derived: dict[str, Callable[[], str]] = {}
        if settings.toolchain.gobin:
            values["gobin"] = str(root / settings.toolchain.gobin)
        else:
            go = settings.toolchain.go

            def discover_gobin() -> str:
                gopath = executor.capture(go, ["env", "GOPATH"])
                return str(Path(gopath) / "bin")

            derived["gobin"] = discover_gobin

        return cls(values, derived=derived, logger=logger)
