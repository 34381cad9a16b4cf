# otelkit

Configuration-driven helpers for telemetry in Python services, plus a small
simulator that builds realistic trace and log data from scenario files.

## Modules

- **`otelkit.namer`**: `DefaultNamer` passes operation names through
  unchanged; `name_http`, `name_rpc`, `name_messaging` and `name_db` build
  conventional span names.

  ```python
  from otelkit.namer import name_http, name_rpc

  name_http("GET", "/users/{id}")    # "GET /users/{id}"
  name_rpc("Greeter", "SayHello")    # "Greeter/SayHello"
  ```

- **`otelkit.baggage`**: `Baggage` is an immutable set of members checked
  against the W3C Baggage rules. `set`, `delete` return a new `Baggage`;
  `get` returns the value or `""`; `as_dict` returns all members. Values are
  given percent-encoded and stored decoded. An invalid key or value raises
  `BaggageError`.

  ```python
  from otelkit.baggage import Baggage

  bag = Baggage().set("tenant.id", "acme")
  bag.get("tenant.id")      # "acme"
  bag.delete("tenant.id").as_dict()   # {}
  ```

- **`otelkit.config`**: `TelemetryConfig` and its parts (`OTLPConfig`,
  `TracesConfig`, `LogsConfig`, `MetricsConfig`, `SamplingConfig`,
  `PropConfig`, and the older `ExporterConfig`). The helpers
  `sampling_config()`, `traces_exporter()`, `otlp_endpoint()` and
  `otlp_config()` work out the effective settings, falling back to the older
  top-level `sampling` and `exporter` sections.

- **`otelkit.config_loader`**: `parse_config(data, environ=None)` and
  `load_config(path, environ=None)` read YAML or JSON. Environment variables
  (`os.environ` unless `environ` is given) such as `OTEL_SERVICE_NAME` or
  `OTEL_EXPORTER_OTLP_ENDPOINT` override values from the document, defaults
  fill whatever is still unset, and the result is validated. Durations may be
  written like `"10s"`; bare numbers are milliseconds. Any problem raises
  `ConfigError`.

  ```python
  from otelkit.config_loader import load_config

  cfg = load_config("telemetry.yaml")
  if cfg.is_enabled():
      print(cfg.traces_exporter(), cfg.otlp_endpoint())
  ```

- **`otelkit.exporter`**: `resolve_trace_exporter_params`,
  `resolve_log_exporter_params` and `resolve_metric_exporter_params` combine
  the shared OTLP settings with each signal's overrides into an
  `ExporterParams`. `build_http_options` and `build_grpc_options` turn an
  `ExporterParams` into a list of options through callables you supply;
  `normalize_exporter_type` maps `stdout` to `console` and `noop` to `nop`.

- **`otelkit.tracker`**: `configure(tracer, namer=None)` sets a process-wide
  tracer and namer; `start(operation, **kwargs)` calls the tracer's
  `start_span` with the name the namer gives. With no tracer configured it
  returns a span that records nothing. `current_tracer()` returns the tracer.

- **`otelkit.durations`**: `parse_duration("1m30s")` and
  `format_duration(timedelta)` for duration strings with the units `ns`,
  `us`/`µs`, `ms`, `s`, `m` and `h`.

A configuration file looks like this:

```yaml
enabled: true
serviceName: "checkout"
otlp:
  endpoint: "collector:4317"
  protocol: "grpc"
traces:
  exporter: "otlp"
  sampling:
    sampler: "parentbased_traceidratio"
    samplerArg: 0.1
propagation:
  propagators: "tracecontext,baggage"
```

## The simulator

`otlp-sim` generates traces, and logs if asked, from a scenario: a tree of
span templates, each with a service, a kind, a duration, attributes, log lines
and an optional error rate.

```
otlp-sim list
otlp-sim quick --scenario payment --count 5
otlp-sim run --scenario edge-iot --duration 5m --rate 10
```

Built-in scenarios are `payment`, `edge-iot`, `ecommerce` and `health-check`.
`--scenario-file` loads one from YAML:

```yaml
name: my-scenario
description: A custom flow
services:
  - name: web
rootSpan:
  name: "GET /items"
  service: web
  kind: SERVER
  duration: "40ms"
  attributes:
    http.request.method: GET
  logs:
    - level: INFO
      message: "Request received"
  children:
    - name: "SELECT items"
      service: web
      kind: CLIENT
      duration: "10ms"
      errorRate: 0.05
      errorStatus: "query timeout"
```

Flags for both modes: `--endpoint`, `--http`, `--insecure`, `--scenario`,
`--scenario-file`, `--logs` and `--service-name`. `quick` also takes
`--count`; `run` takes `--duration`, `--rate` and `--jitter`.
`OTEL_EXPORTER_OTLP_ENDPOINT`, `OTEL_EXPORTER_OTLP_INSECURE` and
`OTEL_SERVICE_NAME` override the matching flags.

From Python:

```python
from otelkit.sim.engine import Engine, EngineConfig
from otelkit.sim.scenarios import get, list_scenarios

print(sorted(list_scenarios()))
engine = Engine(EngineConfig(service_name="demo"), sleep=lambda _: None)
root = engine.generate_trace(get("health-check"))
print(root.name, len(engine.recorder.finished))
```

`Engine` accepts an `exporter` callable that receives each finished
`SpanRecord`; exceptions it raises are counted and summarised by
`engine.shutdown()`.

## What it does not do

Nothing in this package opens a network connection. The simulator records
spans and logs in memory (`engine.recorder.spans`, `.finished`, `.logs`) and
hands finished spans to an `exporter` callable if you give one; it does not
send OTLP data to a collector over gRPC or HTTP. The endpoint, protocol and
TLS settings are only resolved into `ExporterParams`. There is no
instrumentation for HTTP or gRPC servers and clients.