"""Telemetry helpers: span naming, baggage, configuration loading, exporter settings and a tracer registry."""

__version__ = "0.1.0"