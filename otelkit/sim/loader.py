"""Loading of scenarios from YAML files."""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from otelkit.durations import parse_duration
from otelkit.sim.scenario import LogTemplate, Scenario, Service, SpanKind, SpanTemplate

__all__ = ["ScenarioLoadError", "load_from_file"]


class ScenarioLoadError(ValueError):
    """Raised when a scenario file cannot be read, parsed or is incomplete."""


def _mapping(value: Any, where: str) -> dict[Any, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{where}: expected a mapping")
    return value


def _sequence(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{where}: expected a list")
    return value


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"{where}: expected a string")


def _string_map(value: Any, where: str) -> dict[str, str]:
    return {
        _string(key, where): _string(item, f"{where}.{key}")
        for key, item in _mapping(value, where).items()
    }


def _number(value: Any, where: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{where}: expected a number")
    return float(value)


def _duration(value: Any, where: str) -> timedelta:
    if value is None:
        return timedelta(0)
    try:
        return parse_duration(_string(value, where))
    except ValueError as exc:
        raise ValueError(f"{where}: {exc}") from exc


def _kind(value: Any, where: str) -> SpanKind | str:
    text = _string(value, where)
    if not text:
        return SpanKind.INTERNAL
    try:
        return SpanKind(text)
    except ValueError:
        return text


def _log(data: Any, where: str) -> LogTemplate:
    raw = _mapping(data, where)
    return LogTemplate(
        level=_string(raw.get("level"), f"{where}.level"),
        message=_string(raw.get("message"), f"{where}.message"),
        attributes=_string_map(raw.get("attributes"), f"{where}.attributes"),
        delay=_duration(raw.get("delay"), f"{where}.delay"),
    )


def _span(data: Any, where: str) -> SpanTemplate:
    raw = _mapping(data, where)
    children = _sequence(raw.get("children"), f"{where}.children")
    logs = _sequence(raw.get("logs"), f"{where}.logs")
    return SpanTemplate(
        name=_string(raw.get("name"), f"{where}.name"),
        service=_string(raw.get("service"), f"{where}.service"),
        kind=_kind(raw.get("kind"), f"{where}.kind"),
        duration=_duration(raw.get("duration"), f"{where}.duration"),
        attributes=_string_map(raw.get("attributes"), f"{where}.attributes"),
        children=[_span(child, f"{where}.children[{n}]") for n, child in enumerate(children)],
        logs=[_log(entry, f"{where}.logs[{n}]") for n, entry in enumerate(logs)],
        error_rate=_number(raw.get("errorRate"), f"{where}.errorRate"),
        error_status=_string(raw.get("errorStatus"), f"{where}.errorStatus"),
    )


def _service(data: Any, where: str) -> Service:
    raw = _mapping(data, where)
    return Service(
        name=_string(raw.get("name"), f"{where}.name"),
        attributes=_string_map(raw.get("attributes"), f"{where}.attributes"),
    )


def _scenario(document: Any) -> Scenario:
    raw = _mapping(document, "scenario")
    services = _sequence(raw.get("services"), "services")
    return Scenario(
        name=_string(raw.get("name"), "name"),
        description=_string(raw.get("description"), "description"),
        services=[_service(item, f"services[{n}]") for n, item in enumerate(services)],
        root_span=_span(raw.get("rootSpan"), "rootSpan"),
    )


def load_from_file(path: str | os.PathLike[str]) -> Scenario:
    """Load a scenario from a YAML file.

    Raises ScenarioLoadError if the file cannot be read or parsed, or if
    the scenario has no name.
    """
    try:
        document = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        scenario = _scenario(document)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ScenarioLoadError(f"failed to load scenario file: {exc}") from exc
    if not scenario.name:
        raise ScenarioLoadError("scenario name is required")
    return scenario