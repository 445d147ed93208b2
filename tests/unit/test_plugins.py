"""
Unit tests for toolchain plugin discovery and the service container.
"""

from unittest.mock import MagicMock, patch

import pytest

from muxops.core.container import get_container
from muxops.core.interfaces.logger import ILogger
from muxops.core.registry import discover_plugins
from muxops.plugins.toolchains import GoToolchain, PythonToolchain
from muxops.services.logging import NullLogger


class TestDiscovery:
    """Tests for built-in and entry-point discovery."""

    def test_builtin_toolchains_registered(self):
        discover_plugins()
        container = get_container()

        assert container.list_toolchains() == ["go", "python"]
        assert isinstance(container.get_toolchain("go"), GoToolchain)
        assert isinstance(container.get_toolchain("python"), PythonToolchain)

    def test_unknown_language(self):
        discover_plugins()

        with pytest.raises(KeyError):
            get_container().get_toolchain("rust")

    def test_broken_entry_point_is_skipped(self):
        broken = MagicMock()
        broken.name = "rust"
        broken.load.side_effect = ImportError("no module named muxops_rust")

        with patch("importlib.metadata.entry_points", return_value=[broken]):
            discover_plugins()

        assert get_container().list_toolchains() == ["go", "python"]

    def test_entry_point_toolchain_registered(self):
        class ZigToolchain(GoToolchain):
            language = "zig"
            display_name = "Zig"

        plugin = MagicMock()
        plugin.name = "zig"
        plugin.load.return_value = ZigToolchain

        with patch("importlib.metadata.entry_points", return_value=[plugin]):
            discover_plugins()

        assert "zig" in get_container().list_toolchains()


class TestContainer:
    """Tests for registration and overrides."""

    def test_resolve_unregistered_returns_none(self):
        assert get_container().try_resolve(ILogger) is None

    def test_singleton_registration(self):
        container = get_container()
        logger = NullLogger()
        container.register_singleton(ILogger, implementation=logger)

        assert container.resolve(ILogger) is logger
