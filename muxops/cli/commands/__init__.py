"""
Click command implementations for muxops CLI.

Each module corresponds to a muxops command (e.g., run.py implements
'muxops run'). Commands are registered with the main CLI group via the
register_commands() function in muxops.cli.
"""

from .config import config
from .list_tasks import list_tasks
from .run import run

# List of commands for registration
COMMANDS = [
    config,
    list_tasks,
    run,
]

__all__ = [
    "COMMANDS",
    "config",
    "list_tasks",
    "run",
]
