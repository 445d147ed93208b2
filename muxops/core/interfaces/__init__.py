"""
Interface definitions for muxops's services.

These abstract classes define the contracts that implementations must
follow, enabling dependency inversion and substitution in tests.
"""

from .executor import ICommandExecutor
from .logger import ILogger
from .presenter import IPresenter
from .toolchain import CommandLine, IToolchain

__all__ = [
    "CommandLine",
    "ICommandExecutor",
    "ILogger",
    "IPresenter",
    "IToolchain",
]
