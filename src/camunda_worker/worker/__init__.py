"""External task worker: task handles, handler registry and poll loop."""

from camunda_worker.worker.pool import UnknownTopicError, WorkerPool, WorkerPoolConfig
from camunda_worker.worker.registry import HandlerAlreadyRegisteredError, HandlerRegistry
from camunda_worker.worker.task import Task, TaskHandler

__all__ = [
    "HandlerAlreadyRegisteredError",
    "HandlerRegistry",
    "Task",
    "TaskHandler",
    "UnknownTopicError",
    "WorkerPool",
    "WorkerPoolConfig",
]
