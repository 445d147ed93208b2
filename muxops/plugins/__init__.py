"""
muxops plugin architecture.

This package contains per-language toolchains. New languages can be added
without modifying existing code by dropping a module into
``muxops.plugins.toolchains`` or registering an entry point in the
``muxops.plugins`` group.
"""

from . import toolchains

__all__ = ["toolchains"]
