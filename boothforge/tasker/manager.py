"""
TaskManager module for managing task execution.
"""

from __future__ import annotations
import asyncio
import logging
import threading
from asyncio.exceptions import CancelledError
from typing import Any, Callable, Coroutine, Dict, Iterator, Optional
from blinker import Signal
from .context import ExecutionContext
from .idle import idle_add
from .task import Task


logger = logging.getLogger(__name__)


class TaskManager:
    """
    Runs keyed background tasks on a private asyncio loop.

    Adding a task under a key that is still running cancels the older
    task, so at most one task per key is live. Completion callbacks are
    handed to the main thread scheduler, which is how results re-enter
    the single-threaded document mutation path.
    """

    def __init__(
        self, main_thread_scheduler: Optional[Callable] = None
    ) -> None:
        logger.debug("Initializing TaskManager")
        self._tasks: Dict[Any, Task] = {}
        self._lock = threading.RLock()
        self.tasks_updated: Signal = Signal()
        self._main_thread_scheduler = main_thread_scheduler or idle_add
        self._loop: asyncio.AbstractEventLoop = asyncio.new_event_loop()
        self._thread: threading.Thread = threading.Thread(
            target=self._run_event_loop, args=(self._loop,), daemon=True
        )
        self._thread.start()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        with self._lock:
            return iter(list(self._tasks.values()))

    def has_tasks(self) -> bool:
        with self._lock:
            return bool(self._tasks)

    def get_task(self, key: Any) -> Optional[Task]:
        with self._lock:
            return self._tasks.get(key)

    def _run_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Run the asyncio event loop in a background thread."""
        asyncio.set_event_loop(loop)
        loop.run_forever()

    def add_task(
        self, task: Task, when_done: Optional[Callable[[Task], None]] = None
    ) -> Task:
        """Adds a task and schedules it on the background loop."""
        with self._lock:
            old_task = self._tasks.get(task.key)
            if old_task:
                logger.debug(
                    f"TaskManager: Found existing task key '{task.key}'. "
                    f"Attempting cancellation."
                )
                old_task.cancel()
            else:
                logger.debug(f"TaskManager: Adding new task key '{task.key}'.")

            self._tasks[task.key] = task
            task.status_changed.connect(self._on_task_updated)
            self._emit_tasks_updated_unsafe()

        asyncio.run_coroutine_threadsafe(
            self._run_task(task, when_done), self._loop
        )
        return task

    def add_coroutine(
        self,
        coro: Callable[..., Coroutine[Any, Any, Any]],
        *args: Any,
        key: Optional[Any] = None,
        when_done: Optional[Callable[[Task], None]] = None,
        **kwargs: Any,
    ) -> Task:
        """
        Adds a raw coroutine function. It must accept an ExecutionContext
        as its first argument, followed by *args and **kwargs.
        """
        task = Task(coro, *args, key=key, **kwargs)
        return self.add_task(task, when_done)

    async def run_in_executor(
        self, func: Callable[..., Any], *args: Any
    ) -> Any:
        """
        Runs a blocking function on the loop's default executor so the
        manager's own loop stays responsive.
        """
        return await self._loop.run_in_executor(None, func, *args)

    def run_thread(
        self,
        func: Callable[..., Any],
        *args: Any,
        key: Optional[Any] = None,
        when_done: Optional[Callable[[Task], None]] = None,
    ) -> Task:
        """
        Creates and schedules a task that runs a synchronous function in a
        worker thread.
        """

        async def thread_wrapper(
            context: ExecutionContext, *args: Any
        ) -> Any:
            return await self.run_in_executor(func, *args)

        task = Task(thread_wrapper, *args, key=key)
        return self.add_task(task, when_done)

    def cancel_task(self, key: Any) -> None:
        with self._lock:
            task = self._tasks.get(key)
            if not task or task.is_final():
                return
            logger.debug(f"TaskManager: Cancelling task with key '{key}'.")
            task.cancel()

    async def _run_task(
        self, task: Task, when_done: Optional[Callable[[Task], None]]
    ) -> None:
        """Run the task and clean up when done."""
        context = ExecutionContext(
            update_callback=task.update,
            check_cancelled=task.is_cancelled,
        )
        context.task = task
        try:
            await task.run(context)
        except CancelledError:
            logger.debug(f"Managed task '{task.key}' was cancelled.")
        except Exception:
            # This is the master error handler for all background tasks.
            logger.error(
                f"Unhandled exception in managed task '{task.key}':",
                exc_info=True,
            )
        finally:
            context.flush()
            self._cleanup_task(task)
            if when_done:
                self._main_thread_scheduler(when_done, task)

    def _cleanup_task(self, task: Task) -> None:
        with self._lock:
            if self._tasks.get(task.key) is task:
                del self._tasks[task.key]
            else:
                # Replaced by a newer task under the same key.
                logger.debug(
                    f"TaskManager: Skipping cleanup for replaced task "
                    f"'{task.key}' (status: {task.get_status()})."
                )
            self._emit_tasks_updated_unsafe()

    def _on_task_updated(self, task: Task) -> None:
        with self._lock:
            self._emit_tasks_updated_unsafe()

    def _emit_tasks_updated_unsafe(self) -> None:
        """Must be called with the lock held."""
        tasks = list(self._tasks.values())
        self._main_thread_scheduler(
            self.tasks_updated.send, self, tasks=tasks
        )

    def shutdown(self) -> None:
        """
        Cancels all tasks and stops the event loop. This method is
        thread-safe.
        """
        with self._lock:
            tasks_to_cancel = list(self._tasks.values())
        logger.debug(f"Shutting down. Cancelling {len(tasks_to_cancel)} tasks")
        for task in tasks_to_cancel:
            self.cancel_task(task.key)
        if self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=1.0)
        logger.debug("TaskManager shutdown complete.")


class TaskManagerProxy:
    """
    A lazy-initializing proxy for the TaskManager singleton. The real
    manager, and its thread, are created on first use.
    """

    def __init__(self):
        self._instance: Optional[TaskManager] = None
        self._lock = threading.Lock()

    def _get_instance(self) -> TaskManager:
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    logger.debug(
                        "First use of TaskManager detected. "
                        "Initializing the real instance."
                    )
                    self._instance = TaskManager()
        return self._instance

    def __getattr__(self, name: str) -> Any:
        return getattr(self._get_instance(), name)
