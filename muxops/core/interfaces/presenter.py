"""
Presenter interface definitions for output formatting.

Separates user-facing progress output from internal diagnostics (ILogger).
"""

from abc import ABC, abstractmethod


class IPresenter(ABC):
    """
    Interface for output presentation.

    Implementations handle formatting and displaying output
    to the user.
    """

    @abstractmethod
    def print(self, message: str) -> None:
        """Print a message to output."""
        pass

    @abstractmethod
    def print_error(self, message: str) -> None:
        """Print an error message."""
        pass

    @abstractmethod
    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        pass

    @abstractmethod
    def print_success(self, message: str) -> None:
        """Print a success message."""
        pass

    @abstractmethod
    def print_step(self, message: str) -> None:
        """Print a progress line announcing a recipe step."""
        pass

    @abstractmethod
    def print_header(self, title: str, usage: str) -> None:
        """Print a title and usage banner."""
        pass

    @abstractmethod
    def print_tasks(self, tasks: list[tuple[str, str]]) -> None:
        """
        Print the discovery listing.

        Args:
            tasks: (name, description) pairs, already sorted
        """
        pass
