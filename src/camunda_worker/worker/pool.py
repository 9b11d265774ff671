"""Fixed-delay poll loop: fetch and lock, dispatch to handlers, repeat."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace

from camunda_worker.gateway.base import EngineGateway
from camunda_worker.gateway.errors import EngineError
from camunda_worker.models import FetchAndLockRequest, PollSummary, Topic
from camunda_worker.worker.registry import HandlerRegistry
from camunda_worker.worker.task import Task, TaskHandler

logger = logging.getLogger(__name__)


class UnknownTopicError(RuntimeError):
    """A fetched task belongs to a topic with no registered handler."""

    def __init__(self, task_id: str, topic_name: str) -> None:
        super().__init__(f"No handler registered for topic {topic_name!r} (task {task_id})")
        self.task_id = task_id
        self.topic_name = topic_name


@dataclass(frozen=True, slots=True)
class WorkerPoolConfig:
    """Immutable worker identity and polling parameters."""

    worker_id: str
    max_tasks: int = 1
    poll_interval_seconds: float = 10.0
    use_priority: bool = False
    async_response_timeout_ms: int | None = None

    def __post_init__(self) -> None:
        if not self.worker_id:
            raise ValueError("worker_id must not be empty.")
        if self.max_tasks < 1:
            raise ValueError("max_tasks must be >= 1.")
        if self.poll_interval_seconds < 0:
            raise ValueError("poll_interval_seconds must be >= 0.")
        if self.async_response_timeout_ms is not None and self.async_response_timeout_ms < 0:
            raise ValueError("async_response_timeout_ms must be >= 0.")


class WorkerPool:
    """Polls the engine for registered topics and runs handlers one by one.

    Handlers run synchronously on the polling thread, in the order the engine
    returned the tasks. A failed fetch ends `listen` by raising; handler
    exceptions are logged and counted but never stop the loop.
    """

    def __init__(
        self,
        config: WorkerPoolConfig,
        gateway: EngineGateway,
        registry: HandlerRegistry | None = None,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.registry = registry if registry is not None else HandlerRegistry()
        self._stop = threading.Event()
        self._stop_signal_name: str | None = None

    def register(self, topic: Topic, handler: TaskHandler) -> None:
        self.registry.register(topic, handler)

    def listen(self) -> PollSummary:
        """Poll until stopped; fetch errors propagate to the caller."""

        aggregate = PollSummary()
        logger.info(
            "Worker %s listening on %d topic(s), poll interval %.3fs",
            self.config.worker_id,
            len(self.registry),
            self.config.poll_interval_seconds,
        )
        with self._signal_handlers():
            while not self._stop.is_set():
                try:
                    aggregate.add(self.poll())
                except EngineError as exc:
                    logger.error(
                        "Worker %s stopping, fetch failed: %s",
                        self.config.worker_id,
                        exc,
                    )
                    raise
                if self._stop.wait(self.config.poll_interval_seconds):
                    break

        logger.info(
            "Worker %s stopped%s: polls=%d dispatched=%d handler_errors=%d",
            self.config.worker_id,
            f" on {self._stop_signal_name}" if self._stop_signal_name else "",
            aggregate.polls,
            aggregate.dispatched,
            aggregate.handler_errors,
        )
        return aggregate

    def poll(self) -> PollSummary:
        """Run one fetch-and-dispatch cycle."""

        summary = PollSummary(polls=1)
        topics = self.registry.topics()
        if not topics:
            logger.debug("No topics registered, skipping fetch")
            return summary

        definitions = self.gateway.fetch_and_lock(
            FetchAndLockRequest(
                worker_id=self.config.worker_id,
                max_tasks=self.config.max_tasks,
                topics=topics,
                use_priority=self.config.use_priority,
                async_response_timeout_ms=self.config.async_response_timeout_ms,
            ),
        )
        summary.fetched = len(definitions)

        for definition in definitions:
            handler = self.registry.handler_for(definition.topic_name)
            if handler is None:
                raise UnknownTopicError(definition.id, definition.topic_name)

            task = Task(self.gateway, replace(definition, worker_id=self.config.worker_id))
            logger.info("Dispatching task %s (topic=%s)", task.id, task.topic_name)
            try:
                handler(task)
            except Exception:  # noqa: BLE001
                summary.handler_errors += 1
                logger.exception(
                    "Handler for topic %s failed on task %s",
                    task.topic_name,
                    task.id,
                )
            summary.dispatched += 1

        return summary

    def stop(self) -> None:
        """Ask `listen` to return after the current cycle."""

        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        # Signal handlers can only be installed in the main thread.
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        def _handler(signum: int, _: object | None) -> None:
            try:
                self._stop_signal_name = signal.Signals(signum).name
            except ValueError:
                self._stop_signal_name = str(signum)
            self._stop.set()

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, original_sigint)
            signal.signal(signal.SIGTERM, original_sigterm)
