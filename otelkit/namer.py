"""Span naming strategies and helpers for conventional span names."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = [
    "SpanNamer",
    "DefaultNamer",
    "name_http",
    "name_rpc",
    "name_messaging",
    "name_db",
]


@runtime_checkable
class SpanNamer(Protocol):
    """Turns an operation name into a span name."""

    def name(self, operation: str) -> str:
        """Return the span name for ``operation``."""
        raise NotImplementedError


class DefaultNamer:
    """Returns operation names unchanged, as the semantic conventions recommend."""

    def name(self, operation: str) -> str:
        """Return ``operation`` as the span name; it must be a string."""
        if not isinstance(operation, str):
            raise TypeError(
                f"operation must be a str, not {type(operation).__name__}"
            )
        return operation

    def __repr__(self) -> str:
        return "DefaultNamer()"


def name_http(method: str, route: str) -> str:
    """Span name for an HTTP request: ``"METHOD /route"``."""
    return f"{method} {route}"


def name_rpc(service: str, method: str) -> str:
    """Span name for an RPC call: ``"Service/Method"``."""
    return f"{service}/{method}"


def name_messaging(verb: str, destination: str) -> str:
    """Span name for a messaging operation: ``"verb destination"``."""
    return f"{verb} {destination}"


def name_db(verb: str, table: str) -> str:
    """Span name for a database operation: ``"verb table"``."""
    return f"{verb} {table}"