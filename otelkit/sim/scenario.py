"""Data model of simulation scenarios and semantic-convention attribute helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

__all__ = [
    "SpanKind",
    "Service",
    "LogTemplate",
    "SpanTemplate",
    "Scenario",
    "http_server_attrs",
    "http_client_attrs",
    "rpc_attrs",
    "db_attrs",
    "messaging_attrs",
]


class SpanKind(str, Enum):
    """The role a span plays in a trace."""

    SERVER = "SERVER"
    CLIENT = "CLIENT"
    PRODUCER = "PRODUCER"
    CONSUMER = "CONSUMER"
    INTERNAL = "INTERNAL"

    def __str__(self) -> str:
        return self.value


@dataclass
class Service:
    """A service taking part in a scenario."""

    name: str
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass
class LogTemplate:
    """A log entry emitted within a span."""

    level: str = ""
    message: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    delay: timedelta = timedelta(0)


@dataclass
class SpanTemplate:
    """A span, its simulated duration and its child spans.

    ``kind`` is a SpanKind, or the raw string when a scenario file names a
    kind that is not known.
    """

    name: str = ""
    service: str = ""
    kind: SpanKind | str = SpanKind.INTERNAL
    duration: timedelta = timedelta(0)
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[SpanTemplate] = field(default_factory=list)
    logs: list[LogTemplate] = field(default_factory=list)
    error_rate: float = 0.0
    error_status: str = ""


@dataclass
class Scenario:
    """A complete trace and log simulation scenario."""

    name: str
    description: str = ""
    services: list[Service] = field(default_factory=list)
    root_span: SpanTemplate = field(default_factory=SpanTemplate)


def http_server_attrs(method: str, route: str, target: str, status_code: int) -> dict[str, object]:
    """Attributes for an HTTP server span."""
    return {
        "http.request.method": method,
        "http.route": route,
        "url.path": target,
        "http.response.status_code": status_code,
    }


def http_client_attrs(method: str, url: str, status_code: int) -> dict[str, object]:
    """Attributes for an HTTP client span."""
    return {
        "http.request.method": method,
        "url.full": url,
        "http.response.status_code": status_code,
    }


def rpc_attrs(system: str, service: str, method: str) -> dict[str, object]:
    """Attributes for an RPC span."""
    return {
        "rpc.system": system,
        "rpc.service": service,
        "rpc.method": method,
    }


def db_attrs(system: str, name: str, statement: str) -> dict[str, object]:
    """Attributes for a database span."""
    return {
        "db.system": system,
        "db.namespace": name,
        "db.query.text": statement,
    }


def messaging_attrs(system: str, destination: str, operation: str) -> dict[str, object]:
    """Attributes for a messaging span."""
    return {
        "messaging.system": system,
        "messaging.destination.name": destination,
        "messaging.operation.name": operation,
    }