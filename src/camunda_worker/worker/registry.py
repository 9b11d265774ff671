"""Topic handler registry shared between setup code and the poll loop."""

from __future__ import annotations

import threading
from typing import NamedTuple

from camunda_worker.models import Topic
from camunda_worker.worker.task import TaskHandler


class HandlerAlreadyRegisteredError(ValueError):
    """Raised when a topic already has a handler."""

    def __init__(self, topic_name: str) -> None:
        super().__init__(f"Existing handler for topic: {topic_name!r}")
        self.topic_name = topic_name


class Registration(NamedTuple):
    topic: Topic
    handler: TaskHandler


class HandlerRegistry:
    """At most one handler per topic name; every access holds one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._registrations: dict[str, Registration] = {}

    def register(self, topic: Topic, handler: TaskHandler) -> None:
        with self._lock:
            if topic.name in self._registrations:
                raise HandlerAlreadyRegisteredError(topic.name)
            self._registrations[topic.name] = Registration(topic=topic, handler=handler)

    def handler_for(self, topic_name: str) -> TaskHandler | None:
        with self._lock:
            registration = self._registrations.get(topic_name)
        return None if registration is None else registration.handler

    def topics(self) -> tuple[Topic, ...]:
        """Snapshot of registered topics, in registration order."""

        with self._lock:
            return tuple(registration.topic for registration in self._registrations.values())

    def __contains__(self, topic_name: object) -> bool:
        with self._lock:
            return topic_name in self._registrations

    def __len__(self) -> int:
        with self._lock:
            return len(self._registrations)
