"""
Task registry and graph execution.
"""

from .graph import GraphExecutor
from .registry import TaskRegistry

__all__ = ["GraphExecutor", "TaskRegistry"]
