from dataclasses import fields
from datetime import timedelta

import pytest

from otelkit.config import (
    ExporterConfig,
    LogsConfig,
    MetricsConfig,
    OTLPConfig,
    PropConfig,
    SamplingConfig,
    TelemetryConfig,
    TracesConfig,
    contains_propagator,
    split_propagators,
)


def test_telemetry_is_enabled():
    assert TelemetryConfig().is_enabled() is False
    assert TelemetryConfig(enabled=True).is_enabled() is True
    assert TelemetryConfig(enabled=False).is_enabled() is False


def test_traces_enabled_by_default():
    assert TracesConfig().is_enabled() is True
    assert TracesConfig(enabled=False).is_enabled() is False


@pytest.mark.parametrize("cls", [LogsConfig, MetricsConfig])
def test_logs_and_metrics_opt_in(cls):
    assert cls().is_enabled() is False
    assert cls(enabled=True).is_enabled() is True


@pytest.mark.parametrize("cls", [OTLPConfig, ExporterConfig])
def test_insecure_defaults_true(cls):
    assert cls().is_insecure() is True
    assert cls(insecure=True).is_insecure() is True
    assert cls(insecure=False).is_insecure() is False


def test_propagators_default_to_both():
    prop = PropConfig()
    assert prop.has_trace_context() is True
    assert prop.has_baggage() is True


def test_propagators_explicit_list():
    prop = PropConfig(propagators=" b3 , baggage ")
    assert prop.has_baggage() is True
    assert prop.has_trace_context() is False


def test_split_propagators_trims_and_drops_blanks():
    assert split_propagators(" tracecontext, ,baggage,") == ["tracecontext", "baggage"]
    assert split_propagators("") == []


def test_contains_propagator_exact_match():
    assert contains_propagator("tracecontext,baggage", "baggage") is True
    assert contains_propagator("tracecontext,baggage", "bag") is False


def test_sampling_config_prefers_traces():
    preferred = SamplingConfig(sampler="always_off")
    legacy = SamplingConfig(sampler="always_on")
    cfg = TelemetryConfig(traces=TracesConfig(sampling=preferred), sampling=legacy)
    assert cfg.sampling_config() is preferred


def test_sampling_config_falls_back_to_legacy():
    legacy = SamplingConfig(sampler="traceidratio", sampler_arg=0.5)
    cfg = TelemetryConfig(traces=TracesConfig(), sampling=legacy)
    assert cfg.sampling_config() is legacy
    assert TelemetryConfig().sampling_config() is None


def test_traces_exporter_priority():
    assert TelemetryConfig().traces_exporter() == "otlp"
    legacy = TelemetryConfig(exporter=ExporterConfig(type="console"))
    assert legacy.traces_exporter() == "console"
    both = TelemetryConfig(
        traces=TracesConfig(exporter="none"), exporter=ExporterConfig(type="console")
    )
    assert both.traces_exporter() == "none"


def test_otlp_endpoint_priority():
    assert TelemetryConfig().otlp_endpoint() == "localhost:4317"
    cfg = TelemetryConfig(exporter=ExporterConfig(endpoint="legacy:4317"))
    assert cfg.otlp_endpoint() == "legacy:4317"
    cfg.otlp = OTLPConfig(endpoint="shared:4317")
    assert cfg.otlp_endpoint() == "shared:4317"
    cfg.traces = TracesConfig(endpoint="traces:4317")
    assert cfg.otlp_endpoint() == "traces:4317"


def test_otlp_config_returns_shared_section():
    shared = OTLPConfig(endpoint="collector:4317")
    cfg = TelemetryConfig(otlp=shared, exporter=ExporterConfig(endpoint="legacy:4317"))
    assert cfg.otlp_config() is shared


def test_otlp_config_converts_legacy_exporter():
    legacy = ExporterConfig(
        type="otlp",
        endpoint="legacy:4317",
        insecure=False,
        headers={"k": "v"},
        protocol="http",
        timeout=timedelta(seconds=3),
        compression="gzip",
    )
    converted = TelemetryConfig(exporter=legacy).otlp_config()
    assert converted == OTLPConfig(
        endpoint="legacy:4317",
        insecure=False,
        headers={"k": "v"},
        protocol="http",
        timeout=timedelta(seconds=3),
        compression="gzip",
    )
    assert converted.is_insecure() is False


def test_otlp_config_empty_when_unset():
    assert TelemetryConfig().otlp_config() == OTLPConfig()


def test_field_metadata_records_defaults_and_env():
    cfg = TelemetryConfig()
    meta = {f.name: f.metadata for f in fields(cfg)}
    assert meta["environment"]["default"] == "development"
    assert meta["service_name"]["env"] == "OTEL_SERVICE_NAME"
    assert meta["service_name"]["key"] == "serviceName"
    otlp = cfg.otlp_config()
    otlp_meta = {f.name: f.metadata for f in fields(otlp)}
    assert otlp_meta["endpoint"]["default"] == "localhost:4317"
    assert "http/protobuf" in otlp_meta["protocol"]["choices"]