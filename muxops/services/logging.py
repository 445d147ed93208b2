"""
Logger implementation for muxops internal diagnostics.

Wraps stdlib logging. Every record is tagged with the task that emitted
it, so the interleaved output of a `--jobs` run can be untangled from the
log file afterwards.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, ClassVar

from ..core.interfaces.logger import ILogger

NO_TASK = "-"

# Set by the graph executor in whichever thread runs the task
_current_task: ContextVar[str] = ContextVar("muxops_task", default=NO_TASK)


@contextmanager
def task_scope(name: str) -> Iterator[None]:
    """Attribute log records emitted inside the block to task `name`."""
    token = _current_task.set(name)
    try:
        yield
    finally:
        _current_task.reset(token)


def current_task() -> str:
    return _current_task.get()


class TaskFilter(logging.Filter):
    """Adds the running task's name to each record as `task`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.task = current_task()
        return True


class MuxopsLogger(ILogger):
    """
    Logger for muxops diagnostics.

    Writes to stderr when console output is enabled and to a rotating
    log file (default ~/.muxops/muxops.log) when file output is enabled.
    """

    DEFAULT_LOG_FILE = Path.home() / ".muxops" / "muxops.log"
    MAX_FILE_SIZE = 10 * 1024 * 1024
    BACKUP_COUNT = 3
    FORMAT = "%(asctime)s [%(levelname)s] %(task)s: %(message)s"

    LEVEL_MAP: ClassVar[dict[str, int]] = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(
        self,
        name: str = "muxops",
        level: str = "warning",
        console_enabled: bool = False,
        file_enabled: bool = True,
        log_file: Path | None = None,
    ) -> None:
        """
        Args:
            name: Name of the underlying stdlib logger
            level: Threshold for both handlers (debug, info, warning, error)
            console_enabled: Write records to stderr
            file_enabled: Write records to the rotating log file
            log_file: Log file location (defaults to DEFAULT_LOG_FILE)
        """
        self.log_file = Path(log_file) if log_file else self.DEFAULT_LOG_FILE
        self._handlers: list[logging.Handler] = []

        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()
        self._logger.propagate = False

        threshold = self._level(level)
        if console_enabled:
            self._attach(logging.StreamHandler(sys.stderr), threshold)
        if file_enabled:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self._attach(
                RotatingFileHandler(
                    self.log_file, maxBytes=self.MAX_FILE_SIZE, backupCount=self.BACKUP_COUNT
                ),
                threshold,
            )

    def _level(self, level: str) -> int:
        return self.LEVEL_MAP.get(level.lower(), logging.WARNING)

    def _attach(self, handler: logging.Handler, threshold: int) -> None:
        handler.setLevel(threshold)
        handler.setFormatter(logging.Formatter(self.FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler.addFilter(TaskFilter())
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **kwargs)

    def set_level(self, level: str) -> None:
        """Change the threshold of every attached handler."""
        threshold = self._level(level)
        for handler in self._handlers:
            handler.setLevel(threshold)


class NullLogger(ILogger):
    """No-op logger for testing or when logging is disabled."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def set_level(self, level: str) -> None:
        pass
