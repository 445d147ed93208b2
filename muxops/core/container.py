"""
Dependency injection container for muxops.

Uses dependency-injector for DI with support for:
- Singleton registration from an instance or a lazy factory
- Interface-based resolution
- A toolchain registry keyed by target language
"""

from collections.abc import Callable
from typing import Optional, TypeVar

from dependency_injector import providers

from .interfaces.toolchain import IToolchain

T = TypeVar("T")


class ServiceContainer:
    """
    Dependency injection container for muxops.

    Combines dependency-injector's DI capabilities with the toolchain
    plugin registry.
    """

    _instance: Optional["ServiceContainer"] = None

    def __init__(self) -> None:
        """Initialize the container with empty registries."""
        # Dynamic provider storage (interface -> provider)
        self._providers: dict[type, providers.Provider] = {}

        # Toolchain registry (language -> implementation class)
        self._toolchains: dict[str, type[IToolchain]] = {}

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        """Get the global container instance (singleton)."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the global container (for testing)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Core service registration (uses dependency-injector providers)
    # -------------------------------------------------------------------------

    def register_singleton(
        self,
        interface: type[T],
        implementation: T | None = None,
        factory: Callable[[], T] | None = None,
    ) -> None:
        """
        Register a singleton service.

        Args:
            interface: The interface/protocol type
            implementation: Optional concrete instance
            factory: Optional factory function (for lazy init)
        """
        if implementation is not None:
            self._providers[interface] = providers.Object(implementation)
        elif factory is not None:
            self._providers[interface] = providers.Singleton(factory)
        else:
            raise ValueError("Must provide either implementation or factory")

    def resolve(self, interface: type[T]) -> T:
        """
        Resolve a service by interface.

        Raises:
            KeyError: If no registration found
        """
        if interface not in self._providers:
            raise KeyError(f"No provider registered for: {interface}")
        return self._providers[interface]()

    def try_resolve(self, interface: type[T]) -> T | None:
        """Try to resolve a service, returning None if not registered."""
        if interface not in self._providers:
            return None
        return self._providers[interface]()

    def override(self, interface: type[T], provider: providers.Provider) -> None:
        """
        Override a registered provider (useful for testing).

        Args:
            interface: The interface to override
            provider: The new provider to use
        """
        self._providers[interface] = provider

    # -------------------------------------------------------------------------
    # Toolchain registry
    # -------------------------------------------------------------------------

    def register_toolchain(
        self,
        language: str,
        toolchain_class: type[IToolchain],
    ) -> None:
        """
        Register a toolchain.

        Args:
            language: Language identifier (e.g., 'go', 'python')
            toolchain_class: Class implementing IToolchain
        """
        self._toolchains[language] = toolchain_class

    def get_toolchain(self, language: str) -> IToolchain:
        """
        Get a toolchain instance by language.

        Raises:
            KeyError: If no toolchain registered for the language
        """
        if language not in self._toolchains:
            raise KeyError(f"No toolchain registered for language: {language}")
        return self._toolchains[language]()

    def list_toolchains(self) -> list[str]:
        """List registered toolchain languages."""
        return sorted(self._toolchains)


# -------------------------------------------------------------------------
# Module-level convenience functions
# -------------------------------------------------------------------------


def get_container() -> ServiceContainer:
    """Get the global service container instance."""
    return ServiceContainer.get_instance()


def resolve(interface: type[T]) -> T:
    """Resolve a service from the global container."""
    return get_container().resolve(interface)


def try_resolve(interface: type[T]) -> T | None:
    """Try to resolve a service, returning None if not registered."""
    return get_container().try_resolve(interface)
