import asyncio
import threading
import time
import pytest
from boothforge.tasker import ExecutionContext, Task, TaskManager
from boothforge.tasker.manager import TaskManagerProxy


async def simple_coro(
    context: ExecutionContext, duration=0.1, result="coro_done"
):
    """A simple coroutine that reports progress and completes."""
    context.set_total(5)
    for i in range(5):
        if context.is_cancelled():
            raise asyncio.CancelledError()
        context.set_progress(i + 1)
        context.set_message(f"Step {i + 1}")
        await asyncio.sleep(duration / 5)
    return result


async def failing_coro(context: ExecutionContext):
    await asyncio.sleep(0.01)
    raise ValueError("Coroutine failed intentionally")


async def cancellable_coro(
    context: ExecutionContext, started_event: threading.Event
):
    """A long-running coroutine that can be cancelled."""
    started_event.set()
    for _ in range(100):
        if context.is_cancelled():
            raise asyncio.CancelledError()
        await asyncio.sleep(0.1)
    pytest.fail("Cancellable coroutine was not cancelled.")


@pytest.fixture
def manager():
    """
    Provides a TaskManager that runs main thread callbacks immediately,
    since the tests have no main loop.
    """
    tm = TaskManager(main_thread_scheduler=lambda cb, *a, **kw: cb(*a, **kw))
    yield tm
    tm.shutdown()


class Collector:
    """Records the finished task and signals an event."""

    def __init__(self):
        self.event = threading.Event()
        self.task = None

    def __call__(self, task: Task):
        self.task = task
        self.event.set()

    def wait(self, timeout=2.0) -> Task:
        assert self.event.wait(timeout), "Task did not finish in time"
        assert self.task is not None
        return self.task


class TestCoroutineTasks:
    def test_add_and_complete_coroutine(self, manager: TaskManager):
        done = Collector()
        manager.add_coroutine(simple_coro, key="test1", when_done=done)
        assert manager.get_task("test1") is not None

        task = done.wait()

        assert task.key == "test1"
        assert task.get_status() == "completed"
        assert task.get_progress() == 1.0
        assert task.get_message() == "Step 5"
        assert task.result() == "coro_done"
        assert not manager.has_tasks()

    def test_coroutine_failure(self, manager: TaskManager):
        done = Collector()
        manager.add_coroutine(failing_coro, key="fail1", when_done=done)

        task = done.wait()

        assert task.get_status() == "failed"
        assert isinstance(task.exception(), ValueError)
        with pytest.raises(ValueError, match="failed intentionally"):
            task.result()
        assert not manager.has_tasks()

    def test_coroutine_cancellation(self, manager: TaskManager):
        done = Collector()
        started = threading.Event()
        manager.add_coroutine(
            cancellable_coro, started, key="cancel_me", when_done=done
        )
        assert started.wait(timeout=1)

        manager.cancel_task("cancel_me")

        task = done.wait()
        assert task.get_status() == "canceled"
        with pytest.raises(asyncio.CancelledError):
            task.result()
        assert not manager.has_tasks()

    def test_task_replacement(self, manager: TaskManager):
        """Adding a task under a live key cancels the older task."""
        first_done = Collector()
        second_done = Collector()
        started = threading.Event()

        manager.add_coroutine(
            cancellable_coro, started, key="shared", when_done=first_done
        )
        assert started.wait(timeout=1)
        manager.add_coroutine(
            simple_coro, key="shared", when_done=second_done
        )

        assert first_done.wait().get_status() == "canceled"
        assert second_done.wait().get_status() == "completed"
        assert not manager.has_tasks()

    def test_cancel_unknown_key_is_harmless(self, manager: TaskManager):
        manager.cancel_task("nothing-here")


class TestThreadTasks:
    def test_run_thread_returns_result(self, manager: TaskManager):
        done = Collector()
        caller = threading.get_ident()
        worker = []

        def blocking(a, b):
            worker.append(threading.get_ident())
            time.sleep(0.01)
            return a + b

        manager.run_thread(blocking, 2, 3, key="sum", when_done=done)

        task = done.wait()
        assert task.result() == 5
        assert worker and worker[0] != caller

    def test_run_thread_failure(self, manager: TaskManager):
        done = Collector()

        def broken():
            raise OSError("disk on fire")

        manager.run_thread(broken, when_done=done)

        task = done.wait()
        assert task.get_status() == "failed"
        assert isinstance(task.exception(), OSError)


def test_tasks_updated_signal(manager: TaskManager):
    seen = []
    done = Collector()
    manager.tasks_updated.connect(
        lambda sender, tasks: seen.append(len(tasks)), weak=False
    )

    manager.add_coroutine(simple_coro, key="observed", when_done=done)
    done.wait()

    assert seen[0] == 1
    assert seen[-1] == 0


def test_default_scheduler_uses_idle_queue():
    from boothforge.tasker import idle_queue

    tm = TaskManager()
    try:
        done = Collector()
        tm.add_coroutine(simple_coro, 0.01, key="idle", when_done=done)
        deadline = time.monotonic() + 2
        while not done.event.is_set() and time.monotonic() < deadline:
            idle_queue.run_pending()
            time.sleep(0.01)
        assert done.wait().get_status() == "completed"
    finally:
        tm.shutdown()
        idle_queue.run_pending()


def test_proxy_creates_manager_lazily(mocker):
    instance = mocker.Mock(spec=TaskManager)
    factory = mocker.patch(
        "boothforge.tasker.manager.TaskManager", return_value=instance
    )
    proxy = TaskManagerProxy()
    factory.assert_not_called()

    proxy.has_tasks()
    proxy.get_task("x")

    factory.assert_called_once_with()
    instance.get_task.assert_called_once_with("x")
