"""
Command execution services.
"""

from .command_executor import CommandExecutor
from .signal_handler import ProcessSignalHandler

__all__ = ["CommandExecutor", "ProcessSignalHandler"]
