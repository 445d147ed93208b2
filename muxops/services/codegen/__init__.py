"""
Code generation services.

Compiles interface definitions into per-service bindings and patches the
generated Python modules so they import their siblings relatively.
"""

from .coordinator import CodegenCoordinator
from .import_rewriter import ImportRewriter

__all__ = [
    "CodegenCoordinator",
    "ImportRewriter",
]
