"""
Output presenters for the muxops CLI.
"""

from .console import ConsolePresenter

__all__ = ["ConsolePresenter"]
