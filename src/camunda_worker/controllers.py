"""Controllers for CLI commands."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace

from camunda_worker.config import Settings
from camunda_worker.gateway import EngineError, EngineGateway, HttpEngineGateway
from camunda_worker.models import PollSummary, Topic, variables_from_values
from camunda_worker.worker import Task, WorkerPool, WorkerPoolConfig

logger = logging.getLogger(__name__)

GatewayFactory = Callable[[Settings], EngineGateway]


@dataclass(slots=True)
class StartProcessCommand:
    """CLI input for starting a process instance."""

    process_key: str | None
    business_key: str | None
    variables: tuple[tuple[str, str], ...] = ()


@dataclass(slots=True)
class WorkerCommand:
    """CLI input for worker execution."""

    topics: tuple[str, ...]
    lock_duration_ms: int | None
    once: bool


@dataclass(slots=True)
class CommandResult:
    """Output lines plus the exit status the CLI should report."""

    lines: list[str]
    success: bool = True


class WorkerCliController:
    """Turns CLI commands into gateway and worker pool calls."""

    def __init__(self, gateway_factory: GatewayFactory | None = None) -> None:
        self._gateway_factory = gateway_factory or _http_gateway

    def start_process(self, command: StartProcessCommand) -> CommandResult:
        settings = Settings.from_env()
        process = replace(
            settings.process,
            process_key=command.process_key or settings.process.process_key,
            business_key=command.business_key or settings.process.business_key,
        )
        settings = replace(settings, process=process)
        settings.validate_for_start()

        logger.info("Starting process %s", process.process_key)
        with self._gateway(settings) as gateway:
            try:
                instance_id = gateway.start_process(
                    process.process_key,
                    business_key=process.business_key or None,
                    variables=variables_from_values(dict(command.variables)),
                )
            except EngineError as error:
                return CommandResult(
                    lines=[f"Unable to start process {process.process_key}: {error}"],
                    success=False,
                )

        return CommandResult(
            lines=[
                "Process started: "
                f"key={process.process_key} "
                f"business_key={process.business_key or '-'} "
                f"instance_id={instance_id or '-'}",
            ],
        )

    def run_worker(self, command: WorkerCommand) -> CommandResult:
        settings = Settings.from_env()
        worker_settings = replace(
            settings.worker,
            topics=command.topics or settings.worker.topics,
            lock_duration_ms=command.lock_duration_ms or settings.worker.lock_duration_ms,
        )
        settings = replace(settings, worker=worker_settings)
        settings.validate_for_worker()

        with self._gateway(settings) as gateway:
            pool = WorkerPool(
                WorkerPoolConfig(
                    worker_id=worker_settings.worker_id,
                    max_tasks=worker_settings.max_tasks,
                    poll_interval_seconds=worker_settings.poll_interval_seconds,
                    use_priority=worker_settings.use_priority,
                    async_response_timeout_ms=worker_settings.async_response_timeout_ms,
                ),
                gateway,
            )
            for topic_name in worker_settings.topics:
                pool.register(
                    Topic(name=topic_name, lock_duration_ms=worker_settings.lock_duration_ms),
                    complete_immediately,
                )
            try:
                summary = pool.poll() if command.once else pool.listen()
            except EngineError as error:
                return CommandResult(
                    lines=[f"Worker {worker_settings.worker_id} stopped: fetch failed: {error}"],
                    success=False,
                )

        return CommandResult(lines=[_summary_line(summary)])

    @contextmanager
    def _gateway(self, settings: Settings) -> Iterator[EngineGateway]:
        gateway = self._gateway_factory(settings)
        try:
            yield gateway
        finally:
            close = getattr(gateway, "close", None)
            if close is not None:
                close()


def complete_immediately(task: Task) -> None:
    """Demo handler: log the task and report it completed."""

    logger.info("Processing task %s of activity %s", task.id, task.activity_id)
    try:
        task.complete()
    except EngineError as error:
        logger.warning("Unable to complete task %s: %s", task.id, error)
        return
    logger.info("Completed task %s", task.id)


def _http_gateway(settings: Settings) -> EngineGateway:
    return HttpEngineGateway(
        settings.engine.base_url,
        rest_path=settings.engine.rest_path,
        timeout_seconds=settings.engine.request_timeout_seconds,
    )


def _summary_line(summary: PollSummary) -> str:
    return (
        "Worker summary: "
        f"polls={summary.polls} fetched={summary.fetched} "
        f"dispatched={summary.dispatched} handler_errors={summary.handler_errors}"
    )
