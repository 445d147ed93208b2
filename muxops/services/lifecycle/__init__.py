"""
Lifecycle services.

Container stack control and per-service report handling.
"""

from .compose import ComposeManager
from .reports import ReportManager

__all__ = [
    "ComposeManager",
    "ReportManager",
]
