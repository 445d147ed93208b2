"""
Plugin registry with auto-discovery.

Automatically discovers and registers toolchains from:
1. Built-in plugins in muxops.plugins.toolchains
2. Entry point plugins from external packages
"""

import importlib
import pkgutil

from .container import ServiceContainer, get_container
from .di import resolve_or_default
from .interfaces.logger import ILogger
from .interfaces.toolchain import IToolchain


def _get_logger() -> ILogger:
    from ..services.logging import NullLogger

    return resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]


def discover_plugins(package_name: str = "muxops.plugins.toolchains") -> None:
    """
    Auto-discover and register toolchain plugins.

    Args:
        package_name: Package to scan for toolchain classes
    """
    container = get_container()

    _discover_builtin_plugins(container, package_name)
    _discover_entrypoint_plugins(container)


def _discover_builtin_plugins(container: ServiceContainer, package_name: str) -> None:
    """Discover toolchains from the built-in plugins package."""
    package = importlib.import_module(package_name)
    package_path = getattr(package, "__path__", None)
    if not package_path:
        return

    for _importer, modname, _ispkg in pkgutil.iter_modules(package_path):
        # Skip private modules and base classes
        if modname.startswith("_") or modname == "base":
            continue

        module = importlib.import_module(f"{package_name}.{modname}")
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if _implements(attr, IToolchain):
                _register(container, attr)


def _register(container: ServiceContainer, cls: type) -> None:
    instance = cls()
    container.register_toolchain(instance.language, cls)
    _get_logger().debug("Registered toolchain %s -> %s", instance.language, cls.__name__)


def _implements(cls: object, interface: type) -> bool:
    """
    Check if a class implements an interface.

    Returns True if cls is a concrete subclass of interface
    (not the interface itself and not abstract).
    """
    try:
        return (
            isinstance(cls, type)
            and issubclass(cls, interface)
            and cls is not interface
            and not getattr(cls, "__abstractmethods__", set())
        )
    except TypeError:
        return False


def _discover_entrypoint_plugins(container: ServiceContainer) -> None:
    """
    Discover toolchains registered via entry points.

    External packages can register toolchains by adding to pyproject.toml:

        [project.entry-points."muxops.plugins"]
        rust = "my_package.toolchain:RustToolchain"
    """
    from importlib.metadata import entry_points

    for ep in entry_points(group="muxops.plugins"):
        try:
            plugin_cls = ep.load()
        except Exception as e:
            # Don't fail startup due to broken external plugins
            _get_logger().warning("Failed to load entry point plugin %s: %s", ep.name, e)
            continue
        if _implements(plugin_cls, IToolchain):
            _register(container, plugin_cls)
        else:
            _get_logger().warning("Entry point %s is not a toolchain, ignoring", ep.name)
