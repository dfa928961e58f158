"""
ExecutionContext module for reporting from inside running tasks.
"""

import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class ExecutionContext:
    """
    Handed to every task coroutine as its first argument. Lets the work
    report progress and poll for cancellation without knowing anything
    about the TaskManager.
    """

    def __init__(
        self,
        update_callback: Optional[
            Callable[[Optional[float], Optional[str]], None]
        ] = None,
        check_cancelled: Optional[Callable[[], bool]] = None,
    ):
        self._update_callback = update_callback
        self._check_cancelled = check_cancelled or (lambda: False)
        self._total = 1.0
        self._pending_progress: Optional[float] = None
        self._pending_message: Optional[str] = None
        self.task = None

    def set_total(self, total: float):
        """
        Sets the total value that set_progress() normalizes against.
        """
        self._total = float(total) if total > 0 else 1.0

    def set_progress(self, progress: float):
        normalized = max(0.0, min(1.0, progress / self._total))
        self._pending_progress = normalized
        self.flush()

    def set_message(self, message: str):
        self._pending_message = message
        self.flush()

    def is_cancelled(self) -> bool:
        return self._check_cancelled()

    def flush(self):
        """Immediately sends any pending updates."""
        progress = self._pending_progress
        message = self._pending_message
        self._pending_progress = None
        self._pending_message = None
        if progress is None and message is None:
            return
        if self._update_callback and not self.is_cancelled():
            self._update_callback(progress, message)
