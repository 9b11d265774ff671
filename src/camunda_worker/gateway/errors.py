"""Error taxonomy for remote engine calls."""

from __future__ import annotations

from dataclasses import dataclass

HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404


@dataclass(slots=True)
class EngineError(Exception):
    """Base engine call error.

    `message` carries the engine's own error message verbatim.
    """

    message: str
    status_code: int | None = None
    error_type: str | None = None

    def __str__(self) -> str:
        return self.message


class InvalidInputError(EngineError):
    """The engine rejected the request as malformed (HTTP 400)."""


class NotFoundError(EngineError):
    """Referenced process definition or task does not exist (HTTP 404)."""


class UnexpectedEngineError(EngineError):
    """Any other failure response from the engine."""


class TransportError(EngineError):
    """Connection-level failure; no well-formed response was received."""


def error_for_status(
    status_code: int,
    message: str,
    *,
    error_type: str | None = None,
) -> EngineError:
    """Map a failure status code to its error kind."""

    if status_code == HTTP_BAD_REQUEST:
        return InvalidInputError(message, status_code=status_code, error_type=error_type)
    if status_code == HTTP_NOT_FOUND:
        return NotFoundError(message, status_code=status_code, error_type=error_type)
    return UnexpectedEngineError(message, status_code=status_code, error_type=error_type)
