"""
Signal handler service for interrupt handling during command execution.

External commands inherit the terminal's process group, so Ctrl-C already
reaches them directly and muxops stops before its next step. A second
Ctrl-C kills the children and exits at once. SIGTERM sent to muxops alone
does not reach the children, so it is forwarded to every running child and
muxops exits with 128 + SIGTERM.
"""

from __future__ import annotations

import signal
import subprocess
import sys
import threading
from collections.abc import Callable
from typing import Any

from ...core.interfaces.logger import ILogger


class ProcessSignalHandler:
    """
    Manages signal handling for child process execution.

    Encapsulates interrupt state and the set of in-flight children.
    Follows SRP: only handles signal management.
    """

    HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(
        self,
        on_first_interrupt: Callable[[], None] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        """
        Initialize signal handler.

        Args:
            on_first_interrupt: Callback when the first signal is received
            logger: Logger for internal diagnostics
        """
        self._interrupted = False
        self._interrupt_count = 0
        self._on_first_interrupt = on_first_interrupt
        self._original_handlers: dict[int, Any] = {}
        self._children: set[subprocess.Popen] = set()
        self._children_lock = threading.Lock()
        self._logger = logger

    @property
    def logger(self) -> ILogger:
        """Get logger, resolving from container or creating NullLogger."""
        if self._logger is None:
            from ...core.di import resolve_or_default
            from ..logging import NullLogger

            self._logger = resolve_or_default(ILogger, NullLogger)  # type: ignore[type-abstract]
        return self._logger

    def install(self) -> None:
        """Install signal handlers (main thread only)."""
        self._interrupted = False
        self._interrupt_count = 0
        if threading.current_thread() is not threading.main_thread():
            self.logger.debug("Not on main thread, signal handlers not installed")
            return
        for signum in self.HANDLED_SIGNALS:
            self._original_handlers[signum] = signal.signal(signum, self._handle_signal)
        self.logger.debug("Signal handlers installed")

    def restore(self) -> None:
        """Restore original signal handlers."""
        for signum, handler in self._original_handlers.items():
            signal.signal(signum, handler)
        if self._original_handlers:
            self.logger.debug("Original signal handlers restored")
        self._original_handlers = {}

    def __enter__(self) -> ProcessSignalHandler:
        self.install()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.restore()

    def track(self, process: subprocess.Popen) -> None:
        """Register a running child so signals can be forwarded to it."""
        with self._children_lock:
            self._children.add(process)

    def untrack(self, process: subprocess.Popen) -> None:
        """Forget a child once it has exited."""
        with self._children_lock:
            self._children.discard(process)

    def is_interrupted(self) -> bool:
        """Check if a termination signal has been received."""
        return self._interrupted

    def _forward(self, signum: int) -> None:
        # Copy without taking the lock: the interrupted thread may hold it
        for process in list(self._children):
            if process.poll() is None:
                self.logger.debug("Forwarding signal %d to pid %d", signum, process.pid)
                try:
                    process.send_signal(signum)
                except ProcessLookupError:
                    pass

    def _handle_signal(self, signum: int, frame) -> None:
        """Handle SIGINT/SIGTERM."""
        self._interrupt_count += 1
        self._interrupted = True
        self.logger.debug("Signal %d received: interrupt_count=%d", signum, self._interrupt_count)

        if signum == signal.SIGTERM:
            self._forward(signum)
            sys.exit(128 + signum)

        if self._interrupt_count == 1:
            # Running children got the SIGINT themselves; steps check is_interrupted
            if self._on_first_interrupt:
                self._on_first_interrupt()
        else:
            self.logger.debug("Second interrupt, aborting immediately")
            self._forward(signal.SIGKILL if hasattr(signal, "SIGKILL") else signal.SIGTERM)
            sys.exit(130)  # Standard exit code for SIGINT
