"""
Tasker package for running background work off the editing thread.
"""
from .manager import TaskManager, TaskManagerProxy
from .context import ExecutionContext
from .task import Task, CancelledError
from .idle import idle_add, idle_queue

task_mgr = TaskManagerProxy()

__all__ = [
    "TaskManager",
    "ExecutionContext",
    "Task",
    "CancelledError",
    "idle_add",
    "idle_queue",
    "task_mgr",
]
