"""Runtime configuration for the engine client and worker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from camunda_worker.gateway.http import DEFAULT_REST_PATH, DEFAULT_TIMEOUT_SECONDS

ENV_PREFIX = "CAMUNDA_WORKER_"
DEFAULT_BROKER_URL = "http://localhost:8080"
DEFAULT_WORKER_ID = "camunda-worker"
DEFAULT_TOPICS = ("build",)


@dataclass(slots=True)
class EngineSettings:
    """Engine REST endpoint settings."""

    base_url: str = DEFAULT_BROKER_URL
    rest_path: str = DEFAULT_REST_PATH
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(slots=True)
class ProcessSettings:
    """Defaults for the start-process command."""

    process_key: str = ""
    business_key: str = ""


@dataclass(slots=True)
class WorkerSettings:
    """Worker identity, polling cadence and topic subscriptions."""

    worker_id: str = DEFAULT_WORKER_ID
    max_tasks: int = 1
    poll_interval_seconds: float = 10.0
    use_priority: bool = False
    async_response_timeout_ms: int | None = None
    lock_duration_ms: int = 5_000
    topics: tuple[str, ...] = DEFAULT_TOPICS


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    engine: EngineSettings = field(default_factory=EngineSettings)
    process: ProcessSettings = field(default_factory=ProcessSettings)
    worker: WorkerSettings = field(default_factory=WorkerSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment; unprefixed legacy names are accepted as fallback."""

        async_timeout_raw = _env("ASYNC_RESPONSE_TIMEOUT_MS", "").strip()
        return cls(
            engine=EngineSettings(
                base_url=_env("BROKER_URL", os.getenv("BROKER_URL", DEFAULT_BROKER_URL)),
                rest_path=_env("REST_PATH", DEFAULT_REST_PATH),
                request_timeout_seconds=float(
                    _env("REQUEST_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)),
                ),
            ),
            process=ProcessSettings(
                process_key=_env("PROCESS_ID", os.getenv("PROCESS_ID", "")),
                business_key=_env("BUSINESS_KEY", ""),
            ),
            worker=WorkerSettings(
                worker_id=_env("WORKER_ID", os.getenv("WORKER_ID", DEFAULT_WORKER_ID)),
                max_tasks=int(_env("MAX_TASKS", "1")),
                poll_interval_seconds=float(_env("POLL_INTERVAL_SECONDS", "10.0")),
                use_priority=_env_bool(f"{ENV_PREFIX}USE_PRIORITY", default=False),
                async_response_timeout_ms=int(async_timeout_raw) if async_timeout_raw else None,
                lock_duration_ms=int(_env("LOCK_DURATION_MS", "5000")),
                topics=_split_csv(_env("TOPICS", ",".join(DEFAULT_TOPICS))),
            ),
        )

    def validate_for_engine(self) -> None:
        """Raise configuration error if the engine endpoint is unusable."""

        parsed = urlparse(self.engine.base_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                f"Invalid {ENV_PREFIX}BROKER_URL: {self.engine.base_url!r}. "
                "Expected an absolute URL with http:// or https:// scheme.",
            )
        if self.engine.request_timeout_seconds <= 0:
            raise ValueError(f"{ENV_PREFIX}REQUEST_TIMEOUT_SECONDS must be > 0.")

    def validate_for_start(self) -> None:
        self.validate_for_engine()
        if not self.process.process_key.strip():
            raise ValueError(
                "A process definition key is required. "
                f"Set {ENV_PREFIX}PROCESS_ID or pass --process-id.",
            )

    def validate_for_worker(self) -> None:
        self.validate_for_engine()
        if not self.worker.worker_id.strip():
            raise ValueError(f"{ENV_PREFIX}WORKER_ID must not be empty.")
        if self.worker.max_tasks <= 0:
            raise ValueError(f"{ENV_PREFIX}MAX_TASKS must be a positive integer.")
        if self.worker.poll_interval_seconds < 0:
            raise ValueError(f"{ENV_PREFIX}POLL_INTERVAL_SECONDS must be >= 0.")
        if self.worker.lock_duration_ms <= 0:
            raise ValueError(f"{ENV_PREFIX}LOCK_DURATION_MS must be a positive integer.")
        if (
            self.worker.async_response_timeout_ms is not None
            and self.worker.async_response_timeout_ms < 0
        ):
            raise ValueError(f"{ENV_PREFIX}ASYNC_RESPONSE_TIMEOUT_MS must be >= 0.")
        if not self.worker.topics:
            raise ValueError(
                f"At least one topic is required. Set {ENV_PREFIX}TOPICS or pass --topic.",
            )


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _split_csv(raw: str) -> tuple[str, ...]:
    values: list[str] = []
    for part in raw.split(","):
        normalized = part.strip()
        if normalized and normalized not in values:
            values.append(normalized)
    return tuple(values)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
