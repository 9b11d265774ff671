"""Task handle passed to topic handlers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from camunda_worker.gateway.base import EngineGateway
from camunda_worker.models import TaskDefinition, Variable


class Task:
    """A fetched and locked external task, bound to the gateway that fetched it.

    Handlers end the task's lifecycle by calling `complete` or `fail` exactly
    once. Neither call is guarded against repetition: a second call reaches the
    engine and surfaces whatever error it answers with.
    """

    __slots__ = ("_definition", "_gateway")

    def __init__(self, gateway: EngineGateway, definition: TaskDefinition) -> None:
        self._gateway = gateway
        self._definition = definition

    @property
    def definition(self) -> TaskDefinition:
        return self._definition

    @property
    def id(self) -> str:
        return self._definition.id

    @property
    def topic_name(self) -> str:
        return self._definition.topic_name

    @property
    def worker_id(self) -> str:
        return self._definition.worker_id

    @property
    def activity_id(self) -> str | None:
        return self._definition.activity_id

    @property
    def execution_id(self) -> str | None:
        return self._definition.execution_id

    @property
    def retries(self) -> int | None:
        return self._definition.retries

    @property
    def variables(self) -> Mapping[str, Variable]:
        return MappingProxyType(self._definition.variables)

    @property
    def error_message(self) -> str | None:
        return self._definition.error_message

    @property
    def error_details(self) -> str | None:
        return self._definition.error_details

    def variable(self, name: str, default: Any = None) -> Any:
        """Return the plain value of a fetched variable."""

        variable = self._definition.variables.get(name)
        return default if variable is None else variable.value

    def complete(self, variables: Mapping[str, Variable] | None = None) -> None:
        """Report completion, optionally with output variables."""

        self._gateway.complete_task(
            self._definition.worker_id,
            self._definition.id,
            dict(variables or {}),
        )

    def fail(
        self,
        error_message: str | None = None,
        error_details: str | None = None,
        retries: int = 0,
        retry_timeout_ms: int = 0,
    ) -> None:
        """Report failure; the engine re-offers the task while retries remain."""

        self._gateway.fail_task(
            self._definition.worker_id,
            self._definition.id,
            error_message=error_message,
            error_details=error_details,
            retries=retries,
            retry_timeout_ms=retry_timeout_ms,
        )

    def __repr__(self) -> str:
        return f"Task(id={self.id!r}, topic_name={self.topic_name!r})"


TaskHandler = Callable[[Task], None]
