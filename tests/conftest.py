"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from camunda_worker.config import ENV_PREFIX
from camunda_worker.gateway import EngineError
from camunda_worker.models import FetchAndLockRequest, TaskDefinition, Variable


@dataclass(slots=True)
class FakeGateway:
    """In-memory gateway that replays scripted fetch batches and records calls.

    Each entry of `batches` is either a list of task definitions or an
    `EngineError` to raise; once exhausted, fetches return no tasks.
    """

    batches: list[list[TaskDefinition] | EngineError] = field(default_factory=list)
    complete_errors: list[EngineError | None] = field(default_factory=list)
    fail_errors: list[EngineError | None] = field(default_factory=list)
    start_result: str | None = "instance-1"
    start_error: EngineError | None = None
    fetch_requests: list[FetchAndLockRequest] = field(default_factory=list)
    completed: list[tuple[str, str, dict[str, Variable]]] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)
    started: list[dict[str, Any]] = field(default_factory=list)
    closed: bool = False

    def start_process(
        self,
        process_key: str,
        business_key: str | None = None,
        variables: Mapping[str, Variable] | None = None,
    ) -> str | None:
        self.started.append(
            {
                "process_key": process_key,
                "business_key": business_key,
                "variables": dict(variables or {}),
            },
        )
        if self.start_error is not None:
            raise self.start_error
        return self.start_result

    def fetch_and_lock(self, request: FetchAndLockRequest) -> list[TaskDefinition]:
        self.fetch_requests.append(request)
        if not self.batches:
            return []
        batch = self.batches.pop(0)
        if isinstance(batch, EngineError):
            raise batch
        return list(batch)

    def complete_task(
        self,
        worker_id: str,
        task_id: str,
        variables: Mapping[str, Variable] | None = None,
    ) -> None:
        self.completed.append((worker_id, task_id, dict(variables or {})))
        if self.complete_errors:
            error = self.complete_errors.pop(0)
            if error is not None:
                raise error

    def fail_task(  # noqa: PLR0913
        self,
        worker_id: str,
        task_id: str,
        error_message: str | None = None,
        error_details: str | None = None,
        retries: int = 0,
        retry_timeout_ms: int = 0,
    ) -> None:
        self.failed.append(
            {
                "worker_id": worker_id,
                "task_id": task_id,
                "error_message": error_message,
                "error_details": error_details,
                "retries": retries,
                "retry_timeout_ms": retry_timeout_ms,
            },
        )
        if self.fail_errors:
            error = self.fail_errors.pop(0)
            if error is not None:
                raise error

    def close(self) -> None:
        self.closed = True


def make_task(
    task_id: str,
    topic_name: str,
    *,
    worker_id: str = "test-worker",
    activity_id: str | None = None,
    variables: dict[str, Variable] | None = None,
    retries: int | None = None,
) -> TaskDefinition:
    return TaskDefinition(
        id=task_id,
        topic_name=topic_name,
        worker_id=worker_id,
        activity_id=activity_id or f"activity-{task_id}",
        execution_id=f"execution-{task_id}",
        retries=retries,
        variables=variables or {},
    )


@pytest.fixture()
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop worker-related environment variables so defaults apply."""
    for name in ("BROKER_URL", "PROCESS_ID", "WORKER_ID"):
        monkeypatch.delenv(name, raising=False)
    for name in (
        "BROKER_URL",
        "REST_PATH",
        "REQUEST_TIMEOUT_SECONDS",
        "PROCESS_ID",
        "BUSINESS_KEY",
        "WORKER_ID",
        "MAX_TASKS",
        "POLL_INTERVAL_SECONDS",
        "USE_PRIORITY",
        "ASYNC_RESPONSE_TIMEOUT_MS",
        "LOCK_DURATION_MS",
        "TOPICS",
    ):
        monkeypatch.delenv(f"{ENV_PREFIX}{name}", raising=False)


@pytest.fixture()
def task_factory():
    return make_task
