"""
A toolkit-neutral stand-in for a GUI main loop's idle hook.

Background threads hand callbacks to `idle_add`; the thread that owns the
document drains them with `run_pending`. Hosts that run their own event
loop pass a scheduler to the TaskManager instead.
"""

import logging
import queue
from typing import Any, Callable, Tuple, Dict


logger = logging.getLogger(__name__)


class IdleQueue:
    def __init__(self):
        self._queue: "queue.Queue[Tuple[Callable, Tuple, Dict[str, Any]]]"
        self._queue = queue.Queue()

    def add(self, callback: Callable[..., Any], *args: Any, **kwargs: Any):
        self._queue.put((callback, args, kwargs))

    def run_pending(self) -> int:
        """Runs every queued callback. Returns the number executed."""
        count = 0
        while True:
            try:
                callback, args, kwargs = self._queue.get_nowait()
            except queue.Empty:
                return count
            try:
                callback(*args, **kwargs)
            except Exception:
                logger.error("Error in idle callback", exc_info=True)
            count += 1


idle_queue = IdleQueue()


def idle_add(callback: Callable[..., Any], *args: Any, **kwargs: Any):
    idle_queue.add(callback, *args, **kwargs)
