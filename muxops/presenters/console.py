"""
Console presenter for terminal output.

Colours follow the management console's conventions: blue for progress,
yellow for warnings and cleanup, green for success.
"""

import sys
import threading

from ..core.interfaces.presenter import IPresenter

BOLD = "\033[1m"
RESET = "\033[0m"
RED = "\033[91m"
GREEN = "\033[32m"
BLUE = "\033[34m"
YELLOW = "\033[33m"
CYAN = "\033[36m"


class ConsolePresenter(IPresenter):
    """
    Console output presenter.

    Formats output for human-readable terminal display. Writes are
    serialized so concurrently running tasks never split a line.
    """

    def __init__(self, use_color: bool = True, file=None, err_file=None) -> None:
        """
        Initialize console presenter.

        Args:
            use_color: Whether to use ANSI color codes (only honoured on a TTY)
            file: Output file (defaults to sys.stdout)
            err_file: Error output file (defaults to sys.stderr)
        """
        self._file = file
        self._err_file = err_file
        self._color_requested = use_color
        self._lock = threading.Lock()

    @property
    def _out(self):
        # Looked up per write so redirected streams are honoured
        return self._file if self._file is not None else sys.stdout

    @property
    def _err(self):
        return self._err_file if self._err_file is not None else sys.stderr

    def _colored(self, stream) -> bool:
        isatty = getattr(stream, "isatty", None)
        return self._color_requested and bool(isatty and isatty())

    @property
    def _use_color(self) -> bool:
        return self._colored(self._out)

    def _emit(self, text: str, color: str | None = None, err: bool = False) -> None:
        stream = self._err if err else self._out
        if color and self._colored(stream):
            text = f"{color}{text}{RESET}"
        with self._lock:
            print(text, file=stream, flush=True)

    def print(self, message: str) -> None:
        """Print a message to output."""
        self._emit(message)

    def print_error(self, message: str) -> None:
        """Print an error message to stderr."""
        self._emit(f"Error: {message}", RED, err=True)

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self._emit(f"Warning: {message}", YELLOW, err=True)

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self._emit(message, GREEN)

    def print_step(self, message: str) -> None:
        """Print a progress line."""
        self._emit(message, BLUE)

    def print_tasks(self, tasks: list[tuple[str, str]]) -> None:
        """Print the task listing as aligned name/description columns."""
        if not tasks:
            self._emit("No tasks defined.")
            return
        width = max(20, *(len(name) for name, _ in tasks))
        for name, description in tasks:
            padded = name.ljust(width)
            if self._use_color:
                padded = f"{GREEN}{padded}{RESET}"
            self._emit(f"{padded} {description}")

    def print_header(self, title: str, usage: str) -> None:
        """Print the banner shown above the task listing."""
        self._emit("")
        self._emit(title, BOLD)
        self._emit(f"Usage: {CYAN}{usage}{RESET}" if self._use_color else f"Usage: {usage}")
        self._emit("")
