"""Remote engine gateway: interface, errors and HTTP implementation."""

from camunda_worker.gateway.base import EngineGateway
from camunda_worker.gateway.errors import (
    EngineError,
    InvalidInputError,
    NotFoundError,
    TransportError,
    UnexpectedEngineError,
)
from camunda_worker.gateway.http import HttpEngineGateway

__all__ = [
    "EngineError",
    "EngineGateway",
    "HttpEngineGateway",
    "InvalidInputError",
    "NotFoundError",
    "TransportError",
    "UnexpectedEngineError",
]
