"""Command line of the trace and log simulator."""

from __future__ import annotations

import argparse
import contextlib
import signal
import sys
import threading
import time
from datetime import timedelta
from typing import Iterator, Sequence

from otelkit.durations import format_duration, parse_duration
from otelkit.sim.engine import Engine, EngineConfig
from otelkit.sim.loader import load_from_file
from otelkit.sim.scenario import Scenario
from otelkit.sim.scenarios import get
from otelkit.sim.settings import SimConfig

__all__ = ["load_scenario", "execute_quick", "execute_continuous", "main"]

PROG = "otlp-sim"
EXPORT_GRACE_SECONDS = 0.5

USAGE = """otlp-sim - OpenTelemetry trace/log simulator

Usage:
  otlp-sim <mode> [flags]

Modes:
  quick   Send traces immediately for quick visualization
  run     Simulate real-world timing continuously
  list    List available scenarios

Quick Mode Flags:
  --endpoint     OTLP endpoint (default: localhost:4317)
  --http         Use HTTP instead of gRPC
  --insecure     Skip TLS verification (default: true)
  --scenario     Scenario name (default: payment)
  --count        Number of traces to send (default: 10)
  --logs         Enable log generation
  --service-name Override service name

Continuous Mode Flags:
  --endpoint     OTLP endpoint (default: localhost:4317)
  --http         Use HTTP instead of gRPC
  --insecure     Skip TLS verification (default: true)
  --scenario     Scenario name (default: payment)
  --duration     Total simulation time (default: 1m)
  --rate         Traces per second (default: 1)
  --jitter       Timing variation percentage (default: 20)
  --logs         Enable log generation
  --service-name Override service name

Environment Variables:
  OTEL_EXPORTER_OTLP_ENDPOINT   OTLP endpoint
  OTEL_EXPORTER_OTLP_PROTOCOL   grpc or http
  OTEL_EXPORTER_OTLP_INSECURE   Skip TLS verification
  OTEL_SERVICE_NAME             Default service name

Examples:
  otlp-sim quick --scenario payment --count 5
  otlp-sim run --scenario edge-iot --duration 5m --rate 10
  otlp-sim list"""

SCENARIO_LIST = """Available scenarios:

  payment      Online payment system flow
               - 6 services, 8 spans (gateway \u2192 payment \u2192 fraud/processor)
               - Mix of gRPC, HTTP, async messaging

  edge-iot     Edge device management
               - MQTT \u2192 gRPC \u2192 Redis/TimescaleDB flow
               - High volume, low latency patterns

  ecommerce    E-commerce order flow
               - Order creation with inventory/pricing checks
               - Database and event bus spans

  health-check Simple connectivity test
               - Single HTTP request span
               - Useful for verifying OTLP connection"""


def load_scenario(config: SimConfig) -> Scenario:
    """The scenario file named in ``config`` if any, else the built-in scenario.

    Raises ValueError for an unknown scenario name and ScenarioLoadError
    for a scenario file that cannot be loaded.
    """
    if config.scenario_file:
        return load_from_file(config.scenario_file)
    scenario = get(config.scenario)
    if scenario is None:
        raise ValueError(
            f"unknown scenario: {config.scenario} "
            f"(use '{PROG} list' to see available scenarios)"
        )
    return scenario


def _make_engine(config: SimConfig, jitter_pct: int) -> Engine:
    return Engine(
        EngineConfig(
            endpoint=config.endpoint,
            use_http=config.use_http,
            insecure=config.is_insecure(),
            service_name=config.service_name,
            enable_logs=config.enable_logs,
            jitter_pct=jitter_pct,
        )
    )


def execute_quick(
    config: SimConfig,
    engine: Engine | None = None,
    stop_event: threading.Event | None = None,
) -> int:
    """Send ``config.count`` traces back to back; returns how many were sent.

    Stops early when ``stop_event`` is set. Raises RuntimeError if a trace
    cannot be generated.
    """
    scenario = load_scenario(config)
    if engine is None:
        engine = _make_engine(config, jitter_pct=0)
    stop = stop_event if stop_event is not None else threading.Event()

    print(f"Sending {config.count} traces to {config.endpoint} (scenario: {scenario.name})")
    for number in range(1, config.count + 1):
        if stop.is_set():
            print(f"\nInterrupted after {number - 1} traces")
            return number - 1
        try:
            engine.generate_trace(scenario)
        except Exception as exc:
            raise RuntimeError(f"failed to generate trace {number}: {exc}") from exc
        print(f"Trace {number}/{config.count} sent")

    # Give exporters a moment to flush.
    stop.wait(EXPORT_GRACE_SECONDS)
    print("Done!")
    return config.count


def execute_continuous(
    config: SimConfig,
    engine: Engine | None = None,
    stop_event: threading.Event | None = None,
) -> int:
    """Send traces at ``config.rate`` per second for ``config.duration``.

    Returns the number of traces sent. A trace that fails is reported on
    standard error and skipped. Raises ValueError if the rate is not positive.
    """
    scenario = load_scenario(config)
    if not config.rate > 0:
        raise ValueError(f"rate must be positive, got {config.rate}")
    if engine is None:
        engine = _make_engine(config, jitter_pct=config.jitter)
    stop = stop_event if stop_event is not None else threading.Event()

    print(
        f"Running {scenario.name} scenario for {format_duration(config.duration)} "
        f"at {config.rate:.1f} traces/sec"
    )

    interval = 1.0 / config.rate
    start = time.monotonic()
    deadline = start + config.duration.total_seconds()
    next_tick = start + interval
    sent = 0

    while True:
        if stop.wait(max(0.0, next_tick - time.monotonic())):
            print(f"\nInterrupted after {sent} traces")
            return sent
        now = time.monotonic()
        # Ticks missed while a trace was being generated are dropped.
        while next_tick <= now:
            next_tick += interval
        if now > deadline:
            print(f"\nCompleted: sent {sent} traces")
            return sent
        try:
            engine.generate_trace(scenario)
        except Exception as exc:  # noqa: BLE001 - reported and skipped
            print(f"Warning: failed to generate trace: {exc}", file=sys.stderr)
            continue
        sent += 1


def _insecure_flag(text: str) -> bool:
    return text in ("true", "1")


def _duration_flag(text: str) -> timedelta:
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parser(mode: str, config: SimConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=f"{PROG} {mode}")
    parser.add_argument("--endpoint", default=config.endpoint, help="OTLP endpoint")
    parser.add_argument(
        "--http", dest="use_http", action="store_true", default=config.use_http,
        help="Use HTTP instead of gRPC",
    )
    parser.add_argument(
        "--insecure", type=_insecure_flag, default=config.insecure,
        help="Skip TLS verification (default: true)",
    )
    parser.add_argument(
        "--service-name", dest="service_name", default=config.service_name,
        help="Override service name",
    )
    parser.add_argument("--scenario", default=config.scenario, help="Scenario name")
    parser.add_argument(
        "--scenario-file", dest="scenario_file", default=config.scenario_file,
        help="Custom YAML scenario file",
    )
    parser.add_argument(
        "--logs", dest="enable_logs", action="store_true", default=config.enable_logs,
        help="Enable log generation",
    )
    return parser


def _parse(mode: str, args: Sequence[str]) -> SimConfig:
    config = SimConfig()
    parser = _parser(mode, config)
    if mode == "quick":
        parser.add_argument(
            "--count", type=int, default=config.count, help="Number of traces to send"
        )
    else:
        parser.add_argument(
            "--duration", type=_duration_flag, default=config.duration,
            help="Total simulation time",
        )
        parser.add_argument("--rate", type=float, default=config.rate, help="Traces per second")
        parser.add_argument(
            "--jitter", type=int, default=config.jitter, help="Timing variation percentage"
        )
    namespace = parser.parse_args(list(args))
    for name, value in vars(namespace).items():
        setattr(config, name, value)
    config.apply_env_overrides()
    return config


@contextlib.contextmanager
def _stop_on_signals(stop: threading.Event) -> Iterator[None]:
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        previous[signum] = signal.signal(signum, lambda *_: stop.set())
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _run(mode: str, args: Sequence[str]) -> None:
    config = _parse(mode, args)
    execute = execute_quick if mode == "quick" else execute_continuous
    stop = threading.Event()
    with _stop_on_signals(stop):
        try:
            execute(config, None, stop)
        except Exception as exc:  # noqa: BLE001 - reported to the user
            print(f"Error: {exc}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(USAGE)
        return 1

    mode, rest = args[0], args[1:]
    if mode == "quick":
        _run("quick", rest)
    elif mode == "run":
        _run("run", rest)
    elif mode == "list":
        print(SCENARIO_LIST)
    elif mode in ("-h", "--help", "help"):
        print(USAGE)
    else:
        print(f"Unknown mode: {mode}", file=sys.stderr)
        print(USAGE)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())