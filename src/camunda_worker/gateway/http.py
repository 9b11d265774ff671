"""HTTP gateway for the engine REST API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from camunda_worker.gateway.errors import (
    TransportError,
    UnexpectedEngineError,
    error_for_status,
)
from camunda_worker.models import (
    FetchAndLockRequest,
    TaskDefinition,
    Variable,
    variables_to_payload,
)

logger = logging.getLogger(__name__)

DEFAULT_REST_PATH = "/engine-rest"
DEFAULT_TIMEOUT_SECONDS = 30.0
CONNECT_TIMEOUT_SECONDS = 10.0
HTTP_OK = 200
HTTP_NO_CONTENT = 204


class HttpEngineGateway:
    """Engine gateway over JSON/HTTP with a shared connection pool."""

    def __init__(
        self,
        base_url: str,
        *,
        rest_path: str = DEFAULT_REST_PATH,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") + "/" + rest_path.strip("/")
        self._timeout_seconds = timeout_seconds
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout_seconds, connect=CONNECT_TIMEOUT_SECONDS),
            headers={"Accept": "application/json", **(headers or {})},
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def start_process(
        self,
        process_key: str,
        business_key: str | None = None,
        variables: Mapping[str, Variable] | None = None,
    ) -> str | None:
        body: dict[str, Any] = {"variables": variables_to_payload(variables)}
        if business_key:
            body["businessKey"] = business_key
        response = self._post(
            f"/process-definition/key/{quote(process_key, safe='')}/start",
            body,
            expected=HTTP_OK,
        )
        payload = _decode_json(response)
        if isinstance(payload, dict) and payload.get("id"):
            return str(payload["id"])
        return None

    def fetch_and_lock(self, request: FetchAndLockRequest) -> list[TaskDefinition]:
        response = self._post(
            "/external-task/fetchAndLock",
            request.to_payload(),
            expected=HTTP_OK,
            map_status=False,
            timeout=self._fetch_timeout(request),
        )
        payload = _decode_json(response)
        if not isinstance(payload, list):
            raise UnexpectedEngineError(
                f"fetchAndLock returned {type(payload).__name__}, expected a list",
                status_code=response.status_code,
            )
        try:
            return [
                TaskDefinition.from_payload(entry, worker_id=request.worker_id)
                for entry in payload
            ]
        except (TypeError, ValueError, AttributeError) as exc:
            raise UnexpectedEngineError(
                f"Malformed fetchAndLock response: {exc}",
                status_code=response.status_code,
            ) from exc

    def complete_task(
        self,
        worker_id: str,
        task_id: str,
        variables: Mapping[str, Variable] | None = None,
    ) -> None:
        self._post(
            f"/external-task/{quote(task_id, safe='')}/complete",
            {"workerId": worker_id, "variables": variables_to_payload(variables)},
            expected=HTTP_NO_CONTENT,
        )

    def fail_task(  # noqa: PLR0913
        self,
        worker_id: str,
        task_id: str,
        error_message: str | None = None,
        error_details: str | None = None,
        retries: int = 0,
        retry_timeout_ms: int = 0,
    ) -> None:
        body: dict[str, Any] = {
            "workerId": worker_id,
            "retries": retries,
            "retryTimeout": retry_timeout_ms,
        }
        if error_message is not None:
            body["errorMessage"] = error_message
        if error_details is not None:
            body["errorDetails"] = error_details
        self._post(
            f"/external-task/{quote(task_id, safe='')}/failure",
            body,
            expected=HTTP_NO_CONTENT,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpEngineGateway:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _fetch_timeout(self, request: FetchAndLockRequest) -> httpx.Timeout | None:
        # The engine may hold a long-poll open for the whole async response timeout.
        if not request.async_response_timeout_ms:
            return None
        return httpx.Timeout(
            self._timeout_seconds + request.async_response_timeout_ms / 1000,
            connect=CONNECT_TIMEOUT_SECONDS,
        )

    def _post(
        self,
        path: str,
        body: dict[str, Any],
        *,
        expected: int,
        map_status: bool = True,
        timeout: httpx.Timeout | None = None,
    ) -> httpx.Response:
        try:
            if timeout is None:
                response = self._client.post(path, json=body)
            else:
                response = self._client.post(path, json=body, timeout=timeout)
        except httpx.HTTPError as exc:
            logger.warning("Transport error calling %s%s: %s", self._base_url, path, exc)
            raise TransportError(str(exc) or type(exc).__name__) from exc

        if response.status_code == expected:
            return response

        error_type, message = _error_body(response)
        if map_status:
            raise error_for_status(response.status_code, message, error_type=error_type)
        raise UnexpectedEngineError(
            message,
            status_code=response.status_code,
            error_type=error_type,
        )


def _error_body(response: httpx.Response) -> tuple[str | None, str]:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("message")
        error_type = payload.get("type")
        if message:
            return error_type, str(message)
        return error_type, f"HTTP {response.status_code}"
    text = response.text.strip()
    return None, text or f"HTTP {response.status_code}"


def _decode_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedEngineError(
            f"Engine returned invalid JSON: {exc}",
            status_code=response.status_code,
        ) from exc

