"""
Click context extension for muxops CLI.

Provides MuxopsContext dataclass that holds the loaded settings and the
task registry, passed through the Click command chain via ctx.obj.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..core.bootstrap import bootstrap
from ..core.container import ServiceContainer
from ..core.interfaces.executor import ICommandExecutor
from ..core.interfaces.presenter import IPresenter
from ..core.settings import MuxopsSettings, load_settings
from ..core.variables import VariableResolver
from ..services.execution import ProcessSignalHandler
from ..services.tasks import GraphExecutor, TaskRegistry


@dataclass
class MuxopsContext:
    """Extended context passed through Click command chain.

    It is created once at CLI startup and passed to commands via Click's
    ctx.obj mechanism.

    Attributes:
        settings: Merged configuration
        container: Bootstrapped service container
        registry: Every task of the catalog
        cwd: Current working directory
    """

    settings: MuxopsSettings
    container: ServiceContainer
    registry: TaskRegistry
    cwd: Path

    @classmethod
    def create(cls, cwd: Path | None = None, config_path: Path | None = None) -> MuxopsContext:
        """Create a MuxopsContext for the current environment.

        Loads settings (walking up from cwd for a config file), bootstraps
        the container and declares the task catalog.

        Raises:
            MuxopsConfigError: If the configuration is unreadable or invalid
        """
        from ..catalog import build_registry

        if cwd is None:
            cwd = Path.cwd()

        settings = load_settings(config_path=config_path, start_dir=str(cwd))
        container = bootstrap(settings)
        registry = build_registry(
            settings,
            container.resolve(ICommandExecutor),  # type: ignore[type-abstract]
            container.resolve(VariableResolver),
            toolchain_for=container.get_toolchain,
            presenter=container.resolve(IPresenter),  # type: ignore[type-abstract]
        )
        return cls(settings=settings, container=container, registry=registry, cwd=cwd)

    @property
    def presenter(self) -> IPresenter:
        return self.container.resolve(IPresenter)  # type: ignore[type-abstract]

    def graph_executor(self, jobs: int | None = None) -> GraphExecutor:
        """Executor over the catalog, defaulting to the configured job count."""
        return GraphExecutor(
            self.registry,
            jobs=jobs or self.settings.execution.jobs,
            presenter=self.presenter,
            signal_handler=self.container.resolve(ProcessSignalHandler),
        )
