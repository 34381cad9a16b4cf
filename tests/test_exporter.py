from datetime import timedelta

import pytest

from otelkit.config import (
    ExporterConfig,
    LogsConfig,
    MetricsConfig,
    OTLPConfig,
    TelemetryConfig,
    TracesConfig,
)
from otelkit.durations import format_duration
from otelkit.exporter import (
    ExporterParams,
    base_exporter_params,
    build_grpc_options,
    build_http_options,
    is_http_scheme,
    normalize_duration,
    normalize_exporter_type,
    resolve_log_exporter_params,
    resolve_metric_exporter_params,
    resolve_trace_exporter_params,
    split_endpoint_url,
)


def _http_builders():
    return (
        lambda v: ("endpoint", v),
        lambda v: ("endpointURL", v),
        lambda _h: ("headers", ""),
        lambda d: ("timeout", format_duration(d)),
        lambda: ("insecure", ""),
        lambda: ("compression", ""),
    )


def _kinds(opts):
    return [kind for kind, _ in opts]


@pytest.mark.parametrize(
    "value, expected",
    [("", "otlp"), ("stdout", "console"), ("noop", "nop"), ("OTLP", "otlp"), ("console", "console")],
)
def test_normalize_exporter_type(value, expected):
    assert normalize_exporter_type(value) == expected


def test_split_endpoint_url():
    assert split_endpoint_url("http://localhost:4318/v1/traces") == ("localhost:4318", "/v1/traces")
    assert split_endpoint_url("https://example.com") == ("example.com", "")
    assert split_endpoint_url("localhost:4317") == ("", "")
    assert split_endpoint_url("") == ("", "")


def test_is_http_scheme():
    assert is_http_scheme("HTTPS")
    assert not is_http_scheme("grpc")


def test_build_http_options():
    params = ExporterParams(
        endpoint="http://localhost:4318/v1/logs",
        headers={"k": "v"},
        timeout=timedelta(seconds=5),
        insecure=True,
        compression="gzip",
    )
    opts = build_http_options(params, *_http_builders())
    assert opts[0] == ("endpointURL", "http://localhost:4318/v1/logs")
    kinds = _kinds(opts)
    for kind in ("headers", "timeout", "insecure", "compression"):
        assert kind in kinds
    assert ("timeout", "5s") in opts

    params.endpoint = "localhost:4317"
    opts = build_http_options(params, *_http_builders())
    assert opts[0] == ("endpoint", "localhost:4317")


def test_build_http_options_minimal():
    params = ExporterParams(
        endpoint="localhost:4317", timeout=timedelta(0), insecure=False, compression="none"
    )
    opts = build_http_options(params, *_http_builders())
    assert opts == [("endpoint", "localhost:4317")]


def test_build_grpc_options():
    params = ExporterParams(
        endpoint="localhost:4317",
        headers={"k": "v"},
        timeout=timedelta(seconds=2),
        insecure=True,
        compression="gzip",
    )
    builders = _http_builders()
    opts = build_grpc_options(params, builders[0], *builders[2:])
    assert opts[0] == ("endpoint", "localhost:4317")
    kinds = _kinds(opts)
    for kind in ("headers", "timeout", "insecure", "compression"):
        assert kind in kinds


def test_normalize_duration():
    assert normalize_duration(timedelta(microseconds=5)) == timedelta(seconds=5)
    assert normalize_duration(timedelta(seconds=2)) == timedelta(seconds=2)
    assert normalize_duration(timedelta(0)) == timedelta(0)


def test_base_params_without_config():
    params = base_exporter_params(None)
    assert params == ExporterParams()
    assert params.endpoint == "localhost:4317"
    assert params.protocol == "grpc"
    assert params.timeout == timedelta(seconds=10)
    assert params.insecure is True


def test_base_params_from_otlp():
    cfg = TelemetryConfig(
        otlp=OTLPConfig(
            endpoint="collector:4317",
            protocol="http",
            insecure=False,
            headers={"k": "v"},
            compression="gzip",
        )
    )
    params = base_exporter_params(cfg)
    assert params.endpoint == "collector:4317"
    assert params.protocol == "http"
    assert params.insecure is False
    assert params.headers == {"k": "v"}
    assert params.compression == "gzip"
    assert params.timeout == timedelta(seconds=10)


def test_base_params_from_legacy_exporter():
    cfg = TelemetryConfig(exporter=ExporterConfig(endpoint="legacy:4317", timeout=timedelta(seconds=3)))
    params = base_exporter_params(cfg)
    assert params.endpoint == "legacy:4317"
    assert params.timeout == timedelta(seconds=3)


def test_trace_params_override():
    cfg = TelemetryConfig(
        otlp=OTLPConfig(endpoint="collector:4317"),
        traces=TracesConfig(exporter="console", endpoint="traces:4317"),
    )
    params = resolve_trace_exporter_params(cfg)
    assert params.type == "console"
    assert params.endpoint == "traces:4317"


def test_trace_params_legacy_type():
    cfg = TelemetryConfig(exporter=ExporterConfig(type="none"))
    assert resolve_trace_exporter_params(cfg).type == "none"


def test_log_params_override():
    cfg = TelemetryConfig(
        otlp=OTLPConfig(endpoint="collector:4317"),
        logs=LogsConfig(exporter="stdout", endpoint="logs:4317"),
    )
    params = resolve_log_exporter_params(cfg)
    assert params.type == "stdout"
    assert params.endpoint == "logs:4317"


def test_metric_params_override_and_fallback():
    cfg = TelemetryConfig(
        otlp=OTLPConfig(endpoint="collector:4317"), metrics=MetricsConfig(exporter="none")
    )
    params = resolve_metric_exporter_params(cfg)
    assert params.type == "none"
    assert params.endpoint == "collector:4317"
    assert resolve_metric_exporter_params(None).type == "otlp"