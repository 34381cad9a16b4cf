"""Generation of traces and logs from simulation scenarios."""

from __future__ import annotations

import math
import random
import re
import secrets
import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import Any, Callable, NamedTuple

from otelkit.config import LogsConfig, OTLPConfig, TelemetryConfig, TracesConfig
from otelkit.exporter import ExporterParams, resolve_trace_exporter_params
from otelkit.sim.scenario import LogTemplate, Scenario, SpanKind, SpanTemplate

__all__ = [
    "TraceSpanKind",
    "Severity",
    "ErrorTracker",
    "SpanRecord",
    "SpanRecorder",
    "EngineConfig",
    "Engine",
    "to_trace_span_kind",
    "to_log_severity",
    "parse_attributes",
]

DEFAULT_SERVICE_NAME = "otlp-sim"


class TraceSpanKind(IntEnum):
    """Span kinds as numbered by the tracing data model."""

    UNSPECIFIED = 0
    INTERNAL = 1
    SERVER = 2
    CLIENT = 3
    PRODUCER = 4
    CONSUMER = 5


class Severity(IntEnum):
    """Log severity numbers of the logs data model."""

    DEBUG = 5
    INFO = 9
    WARN = 13
    ERROR = 17

    def __str__(self) -> str:
        return self.name


_KINDS = {
    SpanKind.SERVER: TraceSpanKind.SERVER,
    SpanKind.CLIENT: TraceSpanKind.CLIENT,
    SpanKind.PRODUCER: TraceSpanKind.PRODUCER,
    SpanKind.CONSUMER: TraceSpanKind.CONSUMER,
}


def to_trace_span_kind(kind: SpanKind | str) -> TraceSpanKind:
    """Map a scenario span kind to a trace span kind; unknown kinds are internal."""
    try:
        return _KINDS.get(SpanKind(kind), TraceSpanKind.INTERNAL)
    except ValueError:
        return TraceSpanKind.INTERNAL


def to_log_severity(level: str) -> Severity:
    """Map a level name to a severity; unknown levels are INFO."""
    try:
        return Severity[level] if level else Severity.INFO
    except KeyError:
        return Severity.INFO


_INT = re.compile(r"[+-]?[0-9]+")
_DEC_FLOAT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_FLOAT = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)
_FLOAT_SPECIALS = frozenset(
    {"inf", "+inf", "-inf", "infinity", "+infinity", "-infinity", "nan"}
)
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _parse_int(text: str) -> int | None:
    if not _INT.fullmatch(text):
        return None
    value = int(text)
    return value if _INT64_MIN <= value <= _INT64_MAX else None


def _parse_float(text: str) -> float | None:
    if text.lower() in _FLOAT_SPECIALS:
        return float(text)
    if _DEC_FLOAT.fullmatch(text):
        value = float(text)
        return None if math.isinf(value) else value
    if _HEX_FLOAT.fullmatch(text):
        try:
            return float.fromhex(text)
        except OverflowError:
            return None
    return None


def _parse_bool(text: str) -> bool | None:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


def parse_attributes(attrs: dict[str, str]) -> dict[str, Any]:
    """Convert string attributes to typed values.

    Each value becomes a 64-bit integer, a float or a boolean if it parses
    as one, in that order, and stays a string otherwise.
    """
    result: dict[str, Any] = {}
    for key, text in attrs.items():
        value: Any = _parse_int(text)
        if value is None:
            value = _parse_float(text)
        if value is None:
            value = _parse_bool(text)
        result[key] = text if value is None else value
    return result


class ErrorTracker:
    """Counts export errors and reports only the first one as it happens."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0
        self._first_error: BaseException | None = None

    @property
    def count(self) -> int:
        return self._count

    @property
    def first_error(self) -> BaseException | None:
        return self._first_error

    def handle(self, error: BaseException) -> None:
        """Record an export error, printing a warning for the first one."""
        with self._lock:
            self._count += 1
            first = self._count == 1
            if first:
                self._first_error = error
        if first:
            print(f"Warning: OTLP export error: {error}")

    def summary(self) -> str:
        """A one-line summary of the errors, or an empty string if none."""
        count = self._count
        if count == 0:
            return ""
        if count == 1:
            return "1 export error occurred (endpoint may be unreachable)"
        return f"{count} export errors occurred (endpoint may be unreachable)"


class _LogRecord(NamedTuple):
    severity: Severity
    message: str
    attributes: dict[str, str]
    trace_id: str
    span_id: str
    timestamp_ns: int


@dataclass(eq=False)
class SpanRecord:
    """A span as it was recorded."""

    name: str
    service: str
    kind: TraceSpanKind
    attributes: dict[str, Any]
    parent: SpanRecord | None = None
    trace_id: str = ""
    span_id: str = ""
    start_time_ns: int = 0
    end_time_ns: int | None = None
    status: str = "UNSET"
    status_message: str = ""
    errors: list[str] = field(default_factory=list)
    logs: list[_LogRecord] = field(default_factory=list)
    _on_end: Callable[[SpanRecord], None] | None = field(default=None, repr=False)

    @property
    def ended(self) -> bool:
        return self.end_time_ns is not None

    def set_error(self, message: str) -> None:
        """Mark the span failed and record the error."""
        self.status = "ERROR"
        self.status_message = message
        self.errors.append(message)

    def end(self) -> None:
        """End the span; ending it again does nothing."""
        if self.end_time_ns is not None:
            return
        self.end_time_ns = time.time_ns()
        if self._on_end is not None:
            self._on_end(self)


class SpanRecorder:
    """Records spans and logs in memory and hands finished spans to an exporter.

    Errors raised by the exporter go to ``error_handler``.
    """

    def __init__(
        self,
        exporter: Callable[[SpanRecord], None] | None = None,
        error_handler: Callable[[BaseException], None] | None = None,
    ) -> None:
        self.exporter = exporter
        self.error_handler = error_handler
        self.spans: list[SpanRecord] = []
        self.finished: list[SpanRecord] = []
        self.logs: list[_LogRecord] = []
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def start_span(
        self,
        service: str,
        name: str,
        kind: TraceSpanKind,
        attributes: dict[str, Any],
        parent: SpanRecord | None = None,
    ) -> SpanRecord:
        """Start a span, a child of ``parent`` if given."""
        span = SpanRecord(
            name=name,
            service=service,
            kind=kind,
            attributes=dict(attributes),
            parent=parent,
            trace_id=parent.trace_id if parent is not None else secrets.token_hex(16),
            span_id=secrets.token_hex(8),
            start_time_ns=time.time_ns(),
            _on_end=self._finish,
        )
        with self._lock:
            self.spans.append(span)
        return span

    def emit_log(
        self,
        span: SpanRecord | None,
        severity: Severity,
        message: str,
        attributes: dict[str, str],
    ) -> _LogRecord:
        """Record a log entry, correlated with ``span`` if one is given."""
        record = _LogRecord(
            severity=severity,
            message=message,
            attributes=dict(attributes),
            trace_id=span.trace_id if span is not None else "",
            span_id=span.span_id if span is not None else "",
            timestamp_ns=time.time_ns(),
        )
        with self._lock:
            self.logs.append(record)
            if span is not None:
                span.logs.append(record)
        return record

    def _finish(self, span: SpanRecord) -> None:
        with self._lock:
            if self._closed:
                return
            self.finished.append(span)
        if self.exporter is None:
            return
        try:
            self.exporter(span)
        except Exception as exc:  # noqa: BLE001 - reported through the handler
            if self.error_handler is not None:
                self.error_handler(exc)

    def shutdown(self) -> None:
        """Stop accepting finished spans."""
        with self._lock:
            self._closed = True


@dataclass
class EngineConfig:
    """Engine settings."""

    endpoint: str = ""
    use_http: bool = False
    insecure: bool = False
    service_name: str = ""
    enable_logs: bool = False
    jitter_pct: int = 0


class Engine:
    """Generates traces and logs from scenarios."""

    def __init__(
        self,
        config: EngineConfig,
        *,
        exporter: Callable[[SpanRecord], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.service_name = config.service_name or DEFAULT_SERVICE_NAME
        self.enable_logs = config.enable_logs
        self.jitter_pct = config.jitter_pct
        self.telemetry = TelemetryConfig(
            enabled=True,
            service_name=self.service_name,
            otlp=OTLPConfig(
                endpoint=config.endpoint,
                protocol="http" if config.use_http else "grpc",
                insecure=config.insecure,
            ),
            traces=TracesConfig(),
        )
        if config.enable_logs:
            self.telemetry.logs = LogsConfig(enabled=True)
        self.exporter_params: ExporterParams = resolve_trace_exporter_params(self.telemetry)
        self.error_tracker = ErrorTracker()
        self.recorder = SpanRecorder(exporter=exporter, error_handler=self.error_tracker.handle)
        self._sleep = sleep
        self._rng = rng if rng is not None else random.Random()

    def generate_trace(self, scenario: Scenario) -> SpanRecord:
        """Generate one complete trace from ``scenario``; returns its root span."""
        return self._generate_span(scenario.root_span, None)

    def _generate_span(self, tmpl: SpanTemplate, parent: SpanRecord | None) -> SpanRecord:
        service = tmpl.service
        if parent is None and self.service_name:
            service = self.service_name

        span = self.recorder.start_span(
            service,
            tmpl.name,
            to_trace_span_kind(tmpl.kind),
            parse_attributes(tmpl.attributes),
            parent,
        )
        try:
            duration = self.apply_jitter(tmpl.duration)
            if self.enable_logs:
                self._generate_logs(tmpl.logs, span)
            if tmpl.error_rate > 0 and self._rng.random() < tmpl.error_rate:
                span.set_error(tmpl.error_status)
            for child in tmpl.children:
                self._generate_span(child, span)
            self._sleep(max(0.0, duration.total_seconds()))
        finally:
            span.end()
        return span

    def _generate_logs(self, logs: list[LogTemplate], span: SpanRecord) -> None:
        for entry in logs:
            self.recorder.emit_log(
                span, to_log_severity(entry.level), entry.message, entry.attributes
            )

    def apply_jitter(self, duration: timedelta) -> timedelta:
        """Vary ``duration`` randomly by up to ``jitter_pct`` percent either way."""
        if self.jitter_pct <= 0:
            return duration
        micros = duration / timedelta(microseconds=1)
        jitter = micros * self.jitter_pct / 100.0
        offset = self._rng.random() * 2 * jitter - jitter
        return duration + timedelta(microseconds=int(offset))

    def shutdown(self) -> None:
        """Stop recording and print a summary of export errors, if any."""
        self.recorder.shutdown()
        summary = self.error_tracker.summary()
        if summary:
            print(f"Export summary: {summary}")