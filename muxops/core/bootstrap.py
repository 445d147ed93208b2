"""
Application bootstrap for muxops.

Initializes the DI container with all services and plugins.
This module should be called once at application startup.
"""

from __future__ import annotations

from pathlib import Path

from .container import ServiceContainer, get_container
from .interfaces.executor import ICommandExecutor
from .interfaces.logger import ILogger
from .interfaces.presenter import IPresenter
from .registry import discover_plugins
from .settings import MuxopsSettings, load_settings
from .variables import VariableResolver

_initialized = False


def bootstrap(settings: MuxopsSettings | None = None) -> ServiceContainer:
    """
    Bootstrap the muxops application.

    Initializes the DI container with:
    - Settings, presenter and logger
    - Signal handler and command executor
    - Variable resolver
    - Toolchain plugins

    Args:
        settings: Pre-loaded settings (loaded from cwd when omitted)

    Returns:
        Initialized ServiceContainer
    """
    global _initialized

    container = get_container()

    if _initialized:
        return container

    if settings is None:
        settings = load_settings()

    _register_core_services(container, settings)
    discover_plugins()

    _initialized = True
    return container


def _register_core_services(container: ServiceContainer, settings: MuxopsSettings) -> None:
    """Register core application services."""
    from ..presenters.console import ConsolePresenter
    from ..services.execution.command_executor import CommandExecutor
    from ..services.execution.signal_handler import ProcessSignalHandler
    from ..services.logging import MuxopsLogger

    container.register_singleton(MuxopsSettings, implementation=settings)
    container.register_singleton(IPresenter, implementation=ConsolePresenter())  # type: ignore[type-abstract]

    def create_logger() -> ILogger:
        return MuxopsLogger(
            level=settings.logging.level,
            console_enabled=settings.logging.console,
            file_enabled=settings.logging.file,
            log_file=_log_file(settings),
        )

    container.register_singleton(ILogger, factory=create_logger)  # type: ignore[type-abstract]

    def create_signal_handler() -> ProcessSignalHandler:
        logger = container.resolve(ILogger)  # type: ignore[type-abstract]
        return ProcessSignalHandler(
            on_first_interrupt=lambda: logger.info(
                "Interrupted. Stopping after the current step... (Ctrl-C again to abort)"
            ),
            logger=logger,
        )

    container.register_singleton(ProcessSignalHandler, factory=create_signal_handler)

    def create_executor() -> ICommandExecutor:
        return CommandExecutor(signal_handler=container.resolve(ProcessSignalHandler))

    container.register_singleton(ICommandExecutor, factory=create_executor)  # type: ignore[type-abstract]

    def create_variables() -> VariableResolver:
        return VariableResolver.from_settings(
            settings,
            container.resolve(ICommandExecutor),  # type: ignore[type-abstract]
        )

    container.register_singleton(VariableResolver, factory=create_variables)


def _log_file(settings: MuxopsSettings) -> Path | None:
    if not settings.logging.path:
        return None
    # Relative paths are taken from the project root
    return settings.project_root / Path(settings.logging.path).expanduser()


def reset() -> None:
    """
    Reset the application state.

    Useful for testing to ensure clean state between tests.
    """
    global _initialized
    ServiceContainer.reset()
    _initialized = False


def is_initialized() -> bool:
    """Check if the application has been bootstrapped."""
    return _initialized
