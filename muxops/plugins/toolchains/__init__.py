"""
Toolchain plugins.

Provides command-line builders for each supported service language.
"""

from .base import BaseToolchain
from .go import GoToolchain
from .python import PythonToolchain

__all__ = [
    "BaseToolchain",
    "GoToolchain",
    "PythonToolchain",
]
