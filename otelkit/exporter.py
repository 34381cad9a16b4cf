"""Resolution of effective exporter parameters for each telemetry signal."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Callable, TypeVar
from urllib.parse import unquote, urlsplit

from otelkit.config import DEFAULT_ENDPOINT, DEFAULT_EXPORTER, TelemetryConfig

__all__ = [
    "ExporterParams",
    "base_exporter_params",
    "resolve_trace_exporter_params",
    "resolve_log_exporter_params",
    "resolve_metric_exporter_params",
    "normalize_exporter_type",
    "normalize_duration",
    "split_endpoint_url",
    "is_http_scheme",
    "build_http_options",
    "build_grpc_options",
]

T = TypeVar("T")

_MILLISECOND = timedelta(milliseconds=1)


@dataclass
class ExporterParams:
    """Settings shared by every exporter kind."""

    type: str = DEFAULT_EXPORTER
    protocol: str = "grpc"
    endpoint: str = DEFAULT_ENDPOINT
    headers: dict[str, str] | None = None
    timeout: timedelta = timedelta(seconds=10)
    compression: str = ""
    insecure: bool = True


def normalize_duration(value: timedelta) -> timedelta:
    """Treat sub-millisecond durations as a millisecond count.

    A numeric value such as ``5000`` read as nanoseconds is really meant
    as 5000 milliseconds.
    """
    if timedelta(0) < value < _MILLISECOND:
        nanoseconds = (value // timedelta(microseconds=1)) * 1000
        return timedelta(milliseconds=nanoseconds)
    return value


def base_exporter_params(cfg: TelemetryConfig | None) -> ExporterParams:
    """Exporter parameters from the shared OTLP settings."""
    params = ExporterParams()
    if cfg is None:
        return params

    otlp = cfg.otlp_config()
    if otlp.endpoint:
        params.endpoint = otlp.endpoint
    if otlp.protocol:
        params.protocol = otlp.protocol
    if otlp.timeout > timedelta(0):
        params.timeout = normalize_duration(otlp.timeout)
    if otlp.headers is not None:
        params.headers = otlp.headers
    params.compression = otlp.compression
    params.insecure = otlp.is_insecure()
    return params


def resolve_trace_exporter_params(cfg: TelemetryConfig | None) -> ExporterParams:
    """Effective trace exporter parameters."""
    params = base_exporter_params(cfg)
    if cfg is None:
        return params
    params.type = cfg.traces_exporter()
    if cfg.traces is not None and cfg.traces.endpoint:
        params.endpoint = cfg.traces.endpoint
    return params


def resolve_log_exporter_params(cfg: TelemetryConfig | None) -> ExporterParams:
    """Effective log exporter parameters."""
    params = base_exporter_params(cfg)
    if cfg is not None and cfg.logs is not None:
        if cfg.logs.exporter:
            params.type = cfg.logs.exporter
        if cfg.logs.endpoint:
            params.endpoint = cfg.logs.endpoint
    return params


def resolve_metric_exporter_params(cfg: TelemetryConfig | None) -> ExporterParams:
    """Effective metric exporter parameters."""
    params = base_exporter_params(cfg)
    if cfg is not None and cfg.metrics is not None:
        if cfg.metrics.exporter:
            params.type = cfg.metrics.exporter
        if cfg.metrics.endpoint:
            params.endpoint = cfg.metrics.endpoint
    return replace(params)


def normalize_exporter_type(value: str) -> str:
    """Canonical exporter type: lower case, ``stdout`` -> ``console``, ``noop`` -> ``nop``."""
    kind = value.strip().lower()
    if not kind:
        return DEFAULT_EXPORTER
    return {"stdout": "console", "noop": "nop"}.get(kind, kind)


def is_http_scheme(scheme: str) -> bool:
    """True for ``http`` and ``https`` in any case."""
    return scheme.lower() in ("http", "https")


def _http_scheme_of(raw: str) -> bool:
    try:
        return is_http_scheme(urlsplit(raw).scheme)
    except ValueError:
        return False


def split_endpoint_url(raw: str) -> tuple[str, str]:
    """Split an http(s) URL into host and path; other input gives ``("", "")``."""
    if not raw:
        return "", ""
    try:
        parts = urlsplit(raw)
    except ValueError:
        return "", ""
    if not is_http_scheme(parts.scheme):
        return "", ""
    host = parts.netloc.rpartition("@")[2]
    return host, unquote(parts.path)


def build_http_options(
    params: ExporterParams,
    with_endpoint: Callable[[str], T],
    with_endpoint_url: Callable[[str], T],
    with_headers: Callable[[dict[str, str]], T],
    with_timeout: Callable[[timedelta], T],
    with_insecure: Callable[[], T],
    with_compression: Callable[[], T],
) -> list[T]:
    """Build HTTP exporter options; a full URL endpoint uses ``with_endpoint_url``."""
    if _http_scheme_of(params.endpoint):
        options = [with_endpoint_url(params.endpoint)]
    else:
        options = [with_endpoint(params.endpoint)]
    options.extend(
        _common_options(params, with_headers, with_timeout, with_insecure, with_compression)
    )
    return options


def build_grpc_options(
    params: ExporterParams,
    with_endpoint: Callable[[str], T],
    with_headers: Callable[[dict[str, str]], T],
    with_timeout: Callable[[timedelta], T],
    with_insecure: Callable[[], T],
    with_compression: Callable[[], T],
) -> list[T]:
    """Build gRPC exporter options, endpoint first."""
    options = [with_endpoint(params.endpoint)]
    options.extend(
        _common_options(params, with_headers, with_timeout, with_insecure, with_compression)
    )
    return options


def _common_options(
    params: ExporterParams,
    with_headers: Callable[[dict[str, str]], T],
    with_timeout: Callable[[timedelta], T],
    with_insecure: Callable[[], T],
    with_compression: Callable[[], T],
) -> list[T]:
    options: list[T] = []
    if params.headers:
        options.append(with_headers(params.headers))
    if params.timeout > timedelta(0):
        options.append(with_timeout(params.timeout))
    if params.insecure:
        options.append(with_insecure())
    if params.compression == "gzip":
        options.append(with_compression())
    return options