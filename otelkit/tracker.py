"""Process-wide tracer and span namer used to start spans."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from otelkit.namer import DefaultNamer, SpanNamer

__all__ = ["configure", "start", "current_tracer"]


class _Tracer(Protocol):
    def start_span(self, name: str, **kwargs: Any) -> Any:
        ...


@dataclass
class _NonRecordingSpan:
    """A span handed out while no tracer is configured.

    It is never exported; what is set on it stays on the object itself.
    """

    attributes: dict[str, Any] = field(default_factory=dict)
    status: tuple[Any, ...] | None = None
    exceptions: list[BaseException] = field(default_factory=list)
    ended: bool = False

    def is_recording(self) -> bool:
        return False

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def set_status(self, *args: Any, **kwargs: Any) -> None:
        self.status = args + tuple(kwargs.values())

    def record_exception(self, exception: BaseException, *args: Any, **kwargs: Any) -> None:
        self.exceptions.append(exception)

    def end(self, *args: Any, **kwargs: Any) -> None:
        self.ended = True

    def __enter__(self) -> _NonRecordingSpan:
        return self

    def __exit__(self, *exc: object) -> None:
        self.end()


@dataclass(frozen=True)
class _State:
    tracer: _Tracer | None
    namer: SpanNamer


_state = _State(tracer=None, namer=DefaultNamer())


def configure(tracer: _Tracer | None, namer: SpanNamer | None = None) -> None:
    """Set the global tracer and namer; a missing namer means DefaultNamer."""
    global _state
    _state = _State(tracer=tracer, namer=namer if namer is not None else DefaultNamer())


def start(operation: str, **kwargs: Any) -> Any:
    """Start a span named by the configured namer.

    Keyword arguments go to the tracer's ``start_span``. Without a tracer a
    non-recording span is returned.
    """
    state = _state
    if state.tracer is None:
        return _NonRecordingSpan()
    return state.tracer.start_span(state.namer.name(operation), **kwargs)


def current_tracer() -> _Tracer | None:
    """The configured tracer, or None."""
    return _state.tracer