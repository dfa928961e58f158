import asyncio
import logging
from asyncio.exceptions import CancelledError
from typing import Any, Callable, Coroutine, Optional
from blinker import Signal
from .context import ExecutionContext


logger = logging.getLogger(__name__)


class Task:
    """
    A unit of background work, identified by a key. The wrapped coroutine
    function receives an ExecutionContext followed by the task's
    arguments.
    """

    def __init__(
        self,
        coro: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        key: Optional[Any] = None,
        **kwargs: Any,
    ):
        self.coro = coro
        self.args = args
        self.kwargs = kwargs
        self.key = key if key is not None else id(self)
        self._task: Optional[asyncio.Task] = None
        self._status = "pending"
        self._progress = 0.0
        self._message: Optional[str] = None
        self._result: Any = None
        self._exception: Optional[BaseException] = None
        self._cancel_requested = False
        self.status_changed = Signal()

    def __repr__(self) -> str:
        return f"Task(key={self.key!r}, status={self._status!r})"

    def update(
        self, progress: Optional[float] = None, message: Optional[str] = None
    ):
        """
        Updates task progress and/or message and emits a single signal
        for any change.
        """
        updated = False
        if progress is not None and self._progress != progress:
            self._progress = progress
            updated = True
        if message is not None and self._message != message:
            self._message = message
            updated = True
        if updated:
            self.status_changed.send(self)

    async def run(self, context: ExecutionContext):
        """
        Runs the coroutine and tracks its status. Exceptions are recorded
        and re-raised so the TaskManager can log them.
        """
        if self._cancel_requested:
            logger.debug(f"Task {self.key}: cancelled before start.")
            self._status = "canceled"
            self.status_changed.send(self)
            raise CancelledError("Task cancelled before coro execution")

        self._status = "running"
        self.status_changed.send(self)
        self._task = asyncio.create_task(
            self.coro(context, *self.args, **self.kwargs)
        )
        try:
            self._result = await self._task
            self._status = "completed"
            self._progress = 1.0
        except CancelledError:
            logger.debug(f"Task {self.key}: cancelled.")
            self._status = "canceled"
            raise
        except Exception as e:
            self._status = "failed"
            self._exception = e
            raise
        finally:
            self.status_changed.send(self)

    def get_progress(self) -> float:
        return self._progress

    def get_status(self) -> str:
        return self._status

    def get_message(self) -> Optional[str]:
        return self._message

    def is_cancelled(self) -> bool:
        return self._cancel_requested

    def is_final(self) -> bool:
        return self._status in ("completed", "failed", "canceled")

    def result(self) -> Any:
        """
        Returns the coroutine's result. Raises the task's exception if it
        failed, or CancelledError if it was cancelled.
        """
        if self._status == "canceled":
            raise CancelledError(f"Task {self.key} was cancelled")
        if self._exception is not None:
            raise self._exception
        return self._result

    def exception(self) -> Optional[BaseException]:
        return self._exception

    def cancel(self):
        """
        Requests cancellation. Prevents a pending task from starting and
        cancels the underlying asyncio task if it is running.
        """
        self._cancel_requested = True
        task_to_cancel = self._task
        if task_to_cancel and not task_to_cancel.done():
            loop = task_to_cancel.get_loop()
            loop.call_soon_threadsafe(task_to_cancel.cancel)
