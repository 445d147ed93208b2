"""
Codegen coordinator.

Drives the interface-definition compiler once per service, with the
language-specific plugins and output flags supplied by its toolchain.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from ...core.exceptions import CodegenFailedError, MuxopsException
from ...core.interfaces.executor import ICommandExecutor
from ...core.interfaces.logger import ILogger
from ...core.interfaces.toolchain import IToolchain
from ...core.models.service import ServiceDescriptor
from ...core.variables import VariableResolver

SCHEMA_GLOB = "*.proto"
PACKAGE_MARKER = "__init__.py"


def _container_toolchain(language: str) -> IToolchain:
    from ...core.container import get_container

    return get_container().get_toolchain(language)


class CodegenCoordinator:
    """
    Generates bindings for every service from one schema directory.

    Usage:
        coordinator = CodegenCoordinator(executor, variables)
        coordinator.generate(Path("proto"), services)
    """

    def __init__(
        self,
        executor: ICommandExecutor,
        variables: VariableResolver,
        toolchain_for: Callable[[str], IToolchain] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            executor: Runs the compiler
            variables: Supplies tool locations (protoc, python, gobin)
            toolchain_for: Language -> toolchain lookup (defaults to the container)
            logger: Logger for internal diagnostics
        """
        self._executor = executor
        self._variables = variables
        self._toolchain_for = toolchain_for or _container_toolchain
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ...core.di import resolve_or_default
            from ..logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    def prepare(self, service: ServiceDescriptor) -> None:
        """Create the output directory, plus a package marker where required."""
        toolchain = self._toolchain_for(service.language)
        service.gen_dir.mkdir(parents=True, exist_ok=True)
        if toolchain.needs_package_marker:
            (service.gen_dir / PACKAGE_MARKER).touch()
        self.logger.debug("Prepared %s", service.gen_dir)

    def compile(self, schema_dir: Path, service: ServiceDescriptor) -> None:
        """
        Run the compiler for one service over every schema file.

        Raises:
            CodegenFailedError: If there is nothing to compile or the compiler fails
        """
        schema_dir = Path(schema_dir)
        schema_files = sorted(schema_dir.glob(SCHEMA_GLOB)) if schema_dir.is_dir() else []
        if not schema_files:
            raise CodegenFailedError(
                service.name,
                MuxopsException(
                    f"No {SCHEMA_GLOB} files found in {schema_dir}",
                    context={"schema_dir": str(schema_dir)},
                ),
            )

        toolchain = self._toolchain_for(service.language)
        try:
            line = toolchain.codegen_command(
                self._variables, schema_dir, service.gen_dir, schema_files
            )
            self.logger.info("Generating %s bindings for %s", toolchain.display_name, service.name)
            self._executor.run(line.command, line.args, env_overrides=line.env or None)
        except MuxopsException as e:
            raise CodegenFailedError(service.name, e) from e

    def generate(self, schema_dir: Path, services: Iterable[ServiceDescriptor]) -> None:
        """
        Prepare every output directory, then compile for every service.

        Stops at the first failing service; bindings already written for
        earlier services are left in place.
        """
        services = list(services)
        for service in services:
            self.prepare(service)
        for service in services:
            self.compile(schema_dir, service)
