"""Gateway interface consumed by the worker core."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from camunda_worker.models import FetchAndLockRequest, TaskDefinition, Variable


class EngineGateway(Protocol):
    """Protocol implemented by engine transports.

    Every call is one blocking request/response exchange with no retries.
    Failures raise `camunda_worker.gateway.errors.EngineError` subclasses.
    """

    def start_process(
        self,
        process_key: str,
        business_key: str | None = None,
        variables: Mapping[str, Variable] | None = None,
    ) -> str | None:
        """Start a process instance and return its id when reported."""

    def fetch_and_lock(self, request: FetchAndLockRequest) -> list[TaskDefinition]:
        """Claim a batch of tasks for the requesting worker."""

    def complete_task(
        self,
        worker_id: str,
        task_id: str,
        variables: Mapping[str, Variable] | None = None,
    ) -> None:
        """Report successful completion of a locked task."""

    def fail_task(  # noqa: PLR0913
        self,
        worker_id: str,
        task_id: str,
        error_message: str | None = None,
        error_details: str | None = None,
        retries: int = 0,
        retry_timeout_ms: int = 0,
    ) -> None:
        """Report failure of a locked task."""
