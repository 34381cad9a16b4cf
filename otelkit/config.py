"""Telemetry configuration model.

Each field carries its YAML key, environment variable, default and
validation rules in its dataclass metadata.
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field
from datetime import timedelta
from typing import Any

__all__ = [
    "OTLPConfig",
    "TracesConfig",
    "LogsConfig",
    "MetricsConfig",
    "SamplingConfig",
    "ExporterConfig",
    "PropConfig",
    "TelemetryConfig",
    "split_propagators",
    "contains_propagator",
]

DEFAULT_ENDPOINT = "localhost:4317"
DEFAULT_EXPORTER = "otlp"

_EXPORTER_CHOICES = ("otlp", "console", "stdout", "none")
_PROTOCOL_CHOICES = ("grpc", "http/protobuf", "http")
_COMPRESSION_CHOICES = ("gzip", "none")
_SAMPLER_CHOICES = (
    "always_on",
    "always_off",
    "traceidratio",
    "parentbased_always_on",
    "parentbased_always_off",
    "parentbased_traceidratio",
)


def _setting(
    zero: Any = None,
    *,
    key: str,
    env: str | None = None,
    default: Any = MISSING,
    choices: tuple[str, ...] | None = None,
    omitempty: bool = False,
    ge: float | None = None,
    gt: float | None = None,
    le: float | None = None,
    required_if: str | None = None,
) -> Any:
    metadata: dict[str, Any] = {"key": key}
    if env is not None:
        metadata["env"] = env
    if default is not MISSING:
        metadata["default"] = default
    if choices is not None:
        metadata["choices"] = choices
    if omitempty:
        metadata["omitempty"] = True
    if ge is not None:
        metadata["ge"] = ge
    if gt is not None:
        metadata["gt"] = gt
    if le is not None:
        metadata["le"] = le
    if required_if is not None:
        metadata["required_if"] = required_if
    return field(default=zero, metadata=metadata)


def split_propagators(propagators: str) -> list[str]:
    """Split a comma-separated propagator list, dropping blank entries."""
    return [part.strip() for part in propagators.split(",") if part.strip()]


def contains_propagator(propagators: str, name: str) -> bool:
    """Return True if ``name`` appears in the comma-separated list."""
    return name in split_propagators(propagators)


@dataclass
class OTLPConfig:
    """Shared OTLP exporter settings used by every signal."""

    endpoint: str = _setting(
        "", key="endpoint", env="OTEL_EXPORTER_OTLP_ENDPOINT", default=DEFAULT_ENDPOINT
    )
    insecure: bool | None = _setting(
        None, key="insecure", env="OTEL_EXPORTER_OTLP_INSECURE", default=True
    )
    headers: dict[str, str] | None = _setting(
        None, key="headers", env="OTEL_EXPORTER_OTLP_HEADERS"
    )
    protocol: str = _setting(
        "",
        key="protocol",
        env="OTEL_EXPORTER_OTLP_PROTOCOL",
        default="grpc",
        choices=_PROTOCOL_CHOICES,
    )
    timeout: timedelta = _setting(
        timedelta(0),
        key="timeout",
        env="OTEL_EXPORTER_OTLP_TIMEOUT",
        default=timedelta(seconds=10),
        ge=0,
    )
    compression: str = _setting(
        "",
        key="compression",
        env="OTEL_EXPORTER_OTLP_COMPRESSION",
        choices=_COMPRESSION_CHOICES,
        omitempty=True,
    )

    def is_insecure(self) -> bool:
        """TLS is disabled unless ``insecure`` is explicitly False."""
        return self.insecure is None or self.insecure


@dataclass
class SamplingConfig:
    """Trace sampling strategy."""

    sampler: str = _setting(
        "",
        key="sampler",
        env="OTEL_TRACES_SAMPLER",
        default="parentbased_always_on",
        choices=_SAMPLER_CHOICES,
    )
    sampler_arg: float = _setting(
        0.0,
        key="samplerArg",
        env="OTEL_TRACES_SAMPLER_ARG",
        default=1.0,
        ge=0,
        le=1,
    )


@dataclass
class TracesConfig:
    """Tracing subsystem settings."""

    enabled: bool | None = _setting(None, key="enabled", default=True)
    exporter: str = _setting(
        "",
        key="exporter",
        env="OTEL_TRACES_EXPORTER",
        default=DEFAULT_EXPORTER,
        choices=_EXPORTER_CHOICES,
    )
    endpoint: str = _setting("", key="endpoint", env="OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
    sampling: SamplingConfig | None = _setting(None, key="sampling")

    def is_enabled(self) -> bool:
        """Tracing is on unless ``enabled`` is explicitly False."""
        return self.enabled is None or self.enabled


@dataclass
class LogsConfig:
    """Log export settings; off unless enabled."""

    enabled: bool | None = _setting(None, key="enabled", default=False)
    exporter: str = _setting(
        "",
        key="exporter",
        env="OTEL_LOGS_EXPORTER",
        default=DEFAULT_EXPORTER,
        choices=_EXPORTER_CHOICES,
    )
    endpoint: str = _setting("", key="endpoint", env="OTEL_EXPORTER_OTLP_LOGS_ENDPOINT")

    def is_enabled(self) -> bool:
        return self.enabled is True


@dataclass
class MetricsConfig:
    """Metrics export settings; off unless enabled."""

    enabled: bool | None = _setting(None, key="enabled", default=False)
    exporter: str = _setting(
        "",
        key="exporter",
        env="OTEL_METRICS_EXPORTER",
        default=DEFAULT_EXPORTER,
        choices=_EXPORTER_CHOICES,
    )
    endpoint: str = _setting("", key="endpoint", env="OTEL_EXPORTER_OTLP_METRICS_ENDPOINT")
    interval: timedelta = _setting(
        timedelta(0),
        key="interval",
        env="OTEL_METRIC_EXPORT_INTERVAL",
        default=timedelta(seconds=60),
        omitempty=True,
        gt=0,
    )

    def is_enabled(self) -> bool:
        return self.enabled is True


@dataclass
class ExporterConfig:
    """Legacy trace exporter settings, superseded by OTLPConfig and TracesConfig."""

    type: str = _setting(
        "",
        key="type",
        env="OTEL_TRACES_EXPORTER",
        default=DEFAULT_EXPORTER,
        choices=_EXPORTER_CHOICES,
    )
    endpoint: str = _setting(
        "", key="endpoint", env="OTEL_EXPORTER_OTLP_ENDPOINT", default=DEFAULT_ENDPOINT
    )
    insecure: bool | None = _setting(
        None, key="insecure", env="OTEL_EXPORTER_OTLP_INSECURE", default=True
    )
    headers: dict[str, str] | None = _setting(
        None, key="headers", env="OTEL_EXPORTER_OTLP_HEADERS"
    )
    protocol: str = _setting(
        "",
        key="protocol",
        env="OTEL_EXPORTER_OTLP_PROTOCOL",
        default="grpc",
        choices=_PROTOCOL_CHOICES,
        omitempty=True,
    )
    timeout: timedelta = _setting(
        timedelta(0),
        key="timeout",
        env="OTEL_EXPORTER_OTLP_TIMEOUT",
        default=timedelta(seconds=10),
        ge=0,
    )
    compression: str = _setting(
        "",
        key="compression",
        env="OTEL_EXPORTER_OTLP_COMPRESSION",
        choices=_COMPRESSION_CHOICES,
        omitempty=True,
    )

    def is_insecure(self) -> bool:
        return self.insecure is None or self.insecure


@dataclass
class PropConfig:
    """Context propagation settings."""

    propagators: str = _setting(
        "", key="propagators", env="OTEL_PROPAGATORS", default="tracecontext,baggage"
    )

    def has_trace_context(self) -> bool:
        """True if the W3C trace-context propagator is enabled."""
        return not self.propagators or contains_propagator(self.propagators, "tracecontext")

    def has_baggage(self) -> bool:
        """True if the W3C baggage propagator is enabled."""
        return not self.propagators or contains_propagator(self.propagators, "baggage")


@dataclass
class TelemetryConfig:
    """Top-level telemetry configuration."""

    enabled: bool | None = _setting(None, key="enabled", env="OTX_ENABLED", default=False)
    service_name: str = _setting(
        "", key="serviceName", env="OTEL_SERVICE_NAME", required_if="enabled"
    )
    version: str = _setting("", key="version", env="OTEL_SERVICE_VERSION")
    environment: str = _setting(
        "", key="environment", env="OTEL_DEPLOYMENT_ENVIRONMENT", default="development"
    )
    resource_attributes: dict[str, str] | None = _setting(
        None, key="resourceAttributes", env="OTEL_RESOURCE_ATTRIBUTES"
    )
    otlp: OTLPConfig | None = _setting(None, key="otlp")
    traces: TracesConfig | None = _setting(None, key="traces")
    logs: LogsConfig | None = _setting(None, key="logs")
    metrics: MetricsConfig | None = _setting(None, key="metrics")
    propagation: PropConfig | None = _setting(None, key="propagation")
    sampling: SamplingConfig | None = _setting(None, key="sampling")
    exporter: ExporterConfig | None = _setting(None, key="exporter")

    def is_enabled(self) -> bool:
        return self.enabled is True

    def sampling_config(self) -> SamplingConfig | None:
        """Effective sampling: ``traces.sampling``, else the legacy ``sampling``."""
        if self.traces is not None and self.traces.sampling is not None:
            return self.traces.sampling
        return self.sampling

    def traces_exporter(self) -> str:
        """Effective trace exporter type, falling back to the legacy exporter."""
        if self.traces is not None and self.traces.exporter:
            return self.traces.exporter
        if self.exporter is not None and self.exporter.type:
            return self.exporter.type
        return DEFAULT_EXPORTER

    def otlp_endpoint(self) -> str:
        """Effective trace endpoint: traces, then OTLP, then legacy exporter."""
        if self.traces is not None and self.traces.endpoint:
            return self.traces.endpoint
        if self.otlp is not None and self.otlp.endpoint:
            return self.otlp.endpoint
        if self.exporter is not None and self.exporter.endpoint:
            return self.exporter.endpoint
        return DEFAULT_ENDPOINT

    def otlp_config(self) -> OTLPConfig:
        """Effective OTLP settings, converted from the legacy exporter if needed."""
        if self.otlp is not None:
            return self.otlp
        if self.exporter is not None:
            legacy = self.exporter
            return OTLPConfig(
                endpoint=legacy.endpoint,
                insecure=legacy.insecure,
                headers=legacy.headers,
                protocol=legacy.protocol,
                timeout=legacy.timeout,
                compression=legacy.compression,
            )
        return OTLPConfig()