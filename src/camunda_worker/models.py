"""Wire-level data model for external tasks, topics and process variables."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

VARIABLE_TYPE_STRING = "String"
VARIABLE_TYPE_BOOLEAN = "Boolean"
VARIABLE_TYPE_INTEGER = "Integer"
VARIABLE_TYPE_LONG = "Long"
VARIABLE_TYPE_DOUBLE = "Double"
VARIABLE_TYPE_JSON = "Json"
VARIABLE_TYPE_NULL = "Null"

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


@dataclass(frozen=True, slots=True)
class Variable:
    """Typed process variable as exchanged with the engine."""

    value: Any
    type: str | None = None
    value_info: dict[str, Any] | None = None

    @classmethod
    def of(cls, value: Any) -> Variable:
        """Wrap a plain Python value, inferring the engine variable type."""

        if value is None:
            return cls(value=None, type=VARIABLE_TYPE_NULL)
        if isinstance(value, bool):
            return cls(value=value, type=VARIABLE_TYPE_BOOLEAN)
        if isinstance(value, int):
            if _INT32_MIN <= value <= _INT32_MAX:
                return cls(value=value, type=VARIABLE_TYPE_INTEGER)
            return cls(value=value, type=VARIABLE_TYPE_LONG)
        if isinstance(value, float):
            return cls(value=value, type=VARIABLE_TYPE_DOUBLE)
        if isinstance(value, str):
            return cls(value=value, type=VARIABLE_TYPE_STRING)
        return cls(value=json.dumps(value), type=VARIABLE_TYPE_JSON)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"value": self.value}
        if self.type:
            payload["type"] = self.type
        if self.value_info:
            payload["valueInfo"] = dict(self.value_info)
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Variable:
        value_info = payload.get("valueInfo")
        return cls(
            value=payload.get("value"),
            type=payload.get("type"),
            value_info=dict(value_info) if value_info else None,
        )


def variables_from_values(values: Mapping[str, Any]) -> dict[str, Variable]:
    """Build a variable map from plain values; `Variable` instances pass through."""

    return {
        name: value if isinstance(value, Variable) else Variable.of(value)
        for name, value in values.items()
    }


def variables_to_payload(variables: Mapping[str, Variable] | None) -> dict[str, Any]:
    return {name: variable.to_payload() for name, variable in (variables or {}).items()}


def variables_from_payload(payload: Mapping[str, Any] | None) -> dict[str, Variable]:
    return {name: Variable.from_payload(raw or {}) for name, raw in (payload or {}).items()}


@dataclass(frozen=True, slots=True)
class Topic:
    """Class of work a worker subscribes to, with its lock configuration."""

    name: str
    lock_duration_ms: int
    process_definition_id: str | None = None
    process_definition_key: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "topicName": self.name,
            "lockDuration": self.lock_duration_ms,
        }
        if self.process_definition_id:
            payload["processDefinitionId"] = self.process_definition_id
        if self.process_definition_key:
            payload["processDefinitionKey"] = self.process_definition_key
        return payload


@dataclass(frozen=True, slots=True)
class FetchAndLockRequest:
    """One fetch-and-lock call across every subscribed topic."""

    worker_id: str
    max_tasks: int
    topics: tuple[Topic, ...]
    use_priority: bool = False
    async_response_timeout_ms: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "workerId": self.worker_id,
            "maxTasks": self.max_tasks,
            "usePriority": self.use_priority,
            "topics": [topic.to_payload() for topic in self.topics],
        }
        if self.async_response_timeout_ms is not None:
            payload["asyncResponseTimeout"] = self.async_response_timeout_ms
        return payload


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    """Identity and payload of one fetched and locked external task."""

    id: str
    topic_name: str
    worker_id: str
    activity_id: str | None = None
    execution_id: str | None = None
    retries: int | None = None
    variables: dict[str, Variable] = field(default_factory=dict)
    error_message: str | None = None
    error_details: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, worker_id: str) -> TaskDefinition:
        """Build a definition from one fetch-and-lock response entry."""

        task_id = payload.get("id")
        topic_name = payload.get("topicName")
        if not task_id or not topic_name:
            raise ValueError(f"Fetched task is missing id or topicName: {dict(payload)!r}")
        retries = payload.get("retries")
        return cls(
            id=str(task_id),
            topic_name=str(topic_name),
            worker_id=worker_id,
            activity_id=payload.get("activityId"),
            execution_id=payload.get("executionId"),
            retries=int(retries) if retries is not None else None,
            variables=variables_from_payload(payload.get("variables")),
            error_message=payload.get("errorMessage"),
            error_details=payload.get("errorDetails"),
        )


@dataclass(slots=True)
class PollSummary:
    """Counters for one poll cycle or an aggregated listen run."""

    polls: int = 0
    fetched: int = 0
    dispatched: int = 0
    handler_errors: int = 0

    def add(self, other: PollSummary) -> None:
        self.polls += other.polls
        self.fetched += other.fetched
        self.dispatched += other.dispatched
        self.handler_errors += other.handler_errors
