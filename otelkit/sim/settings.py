"""Settings of the trace and log simulator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

__all__ = ["SimConfig"]

ENDPOINT_ENV = "OTEL_EXPORTER_OTLP_ENDPOINT"
INSECURE_ENV = "OTEL_EXPORTER_OTLP_INSECURE"
SERVICE_NAME_ENV = "OTEL_SERVICE_NAME"

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _parse_bool(text: str) -> bool | None:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


@dataclass
class SimConfig:
    """Command-line configuration of the simulator, with its defaults."""

    endpoint: str = "localhost:4317"
    use_http: bool = False
    insecure: bool | None = True
    service_name: str = ""
    scenario: str = "payment"
    scenario_file: str = ""
    enable_logs: bool = False
    count: int = 10
    duration: timedelta = timedelta(minutes=1)
    rate: float = 1.0
    jitter: int = 20

    def is_insecure(self) -> bool:
        """Whether TLS is skipped; an unset value means True."""
        return True if self.insecure is None else self.insecure

    def apply_env_overrides(self, environ: Mapping[str, str] | None = None) -> None:
        """Override endpoint, insecure flag and service name from the environment.

        Reads ``os.environ`` unless ``environ`` is given. A malformed boolean
        is ignored and leaves the current value in place.
        """
        env = os.environ if environ is None else environ
        if ENDPOINT_ENV in env:
            self.endpoint = env[ENDPOINT_ENV]
        if INSECURE_ENV in env:
            parsed = _parse_bool(env[INSECURE_ENV].strip())
            if parsed is not None:
                self.insecure = parsed
        if SERVICE_NAME_ENV in env:
            self.service_name = env[SERVICE_NAME_ENV]