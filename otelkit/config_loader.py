"""Loading of TelemetryConfig from YAML or JSON documents and the environment.

Values are read from the document first, then environment variables named
in the field metadata override them, then defaults fill fields still unset,
and finally the validation rules are checked.
"""

from __future__ import annotations

import dataclasses
import os
import re
import types
import typing
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping

import yaml

from otelkit.config import (
    ExporterConfig,
    LogsConfig,
    MetricsConfig,
    OTLPConfig,
    PropConfig,
    SamplingConfig,
    TelemetryConfig,
    TracesConfig,
)
from otelkit.durations import parse_duration

__all__ = ["ConfigError", "load_config", "parse_config"]

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_NUMERIC = re.compile(r"[+-]?\d+(?:\.\d+)?")

_NAMED_KINDS: dict[str, Any] = {
    "bool": bool,
    "str": str,
    "float": float,
    "int": float,
    "timedelta": timedelta,
    "dict": dict,
    "Dict": dict,
    "Mapping": dict,
    "MutableMapping": dict,
}
for _cls in (
    ExporterConfig,
    LogsConfig,
    MetricsConfig,
    OTLPConfig,
    PropConfig,
    SamplingConfig,
    TelemetryConfig,
    TracesConfig,
):
    _NAMED_KINDS[_cls.__name__] = _cls


class ConfigError(ValueError):
    """Raised when a configuration cannot be read, parsed or validated."""


def _unwrap_text(text: str) -> Any:
    text = text.replace(" ", "")
    for prefix in ("typing.", "datetime.", "collections.abc."):
        text = text.replace(prefix, "")
    if text.startswith("Optional[") and text.endswith("]"):
        text = text[len("Optional["):-1]
    parts = [part for part in text.split("|") if part != "None"]
    if len(parts) == 1:
        text = parts[0]
    base = text.split("[", 1)[0].strip("'\"")
    return _NAMED_KINDS.get(base, text)


def _unwrap(hint: Any) -> Any:
    if isinstance(hint, str):
        return _unwrap_text(hint)
    origin = typing.get_origin(hint)
    if origin is dict:
        return dict
    if origin is typing.Union or origin is types.UnionType:
        inner = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(inner) == 1:
            return _unwrap(inner[0])
    return hint


def _field_kinds(cls: type) -> dict[str, Any]:
    return {f.name: _unwrap(f.type) for f in dataclasses.fields(cls)}


def _is_config(kind: Any) -> bool:
    return isinstance(kind, type) and dataclasses.is_dataclass(kind)


def _parse_bool(text: str, where: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ConfigError(f"{where}: invalid boolean {text!r}")


def _parse_duration_text(text: str, where: str) -> timedelta:
    text = text.strip()
    if _NUMERIC.fullmatch(text):
        # Bare numbers are milliseconds, as the OTel environment spec defines.
        return timedelta(milliseconds=float(text))
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise ConfigError(f"{where}: {exc}") from exc


def _parse_pairs(text: str, where: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"{where}: invalid key=value pair {item!r}")
        result[key.strip()] = value.strip()
    return result


def _from_document(value: Any, kind: Any, where: str) -> Any:
    if _is_config(kind):
        if not isinstance(value, dict):
            raise ConfigError(f"{where}: expected a mapping")
        return _build(kind, value, where)
    if kind is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"{where}: expected a boolean, got {value!r}")
        return value
    if kind is str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ConfigError(f"{where}: expected a string, got {value!r}")
    if kind is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise ConfigError(f"{where}: expected a number, got {value!r}")
    if kind is timedelta:
        if isinstance(value, str):
            return _parse_duration_text(value, where)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return timedelta(milliseconds=value)
        raise ConfigError(f"{where}: expected a duration, got {value!r}")
    if kind is dict:
        if not isinstance(value, dict):
            raise ConfigError(f"{where}: expected a mapping")
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    raise ConfigError(f"{where}: unsupported field type")


def _from_environment(text: str, kind: Any, where: str) -> Any:
    if kind is str:
        return text
    if kind is bool:
        return _parse_bool(text.strip(), where)
    if kind is float:
        try:
            return float(text)
        except ValueError as exc:
            raise ConfigError(f"{where}: invalid number {text!r}") from exc
    if kind is timedelta:
        return _parse_duration_text(text, where)
    if kind is dict:
        return _parse_pairs(text, where)
    raise ConfigError(f"{where}: unsupported field type")


def _build(cls: type, data: Mapping[str, Any], path: str) -> Any:
    kinds = _field_kinds(cls)
    by_key = {f.metadata["key"]: f for f in dataclasses.fields(cls)}
    values: dict[str, Any] = {}
    for key, value in data.items():
        spec = by_key.get(key)
        if spec is None or value is None:
            continue
        values[spec.name] = _from_document(value, kinds[spec.name], f"{path}{key}")
    return cls(**values)


def _apply_environment(obj: Any, environ: Mapping[str, str]) -> None:
    kinds = _field_kinds(type(obj))
    for spec in dataclasses.fields(obj):
        kind = kinds[spec.name]
        if _is_config(kind):
            nested = getattr(obj, spec.name)
            if nested is not None:
                _apply_environment(nested, environ)
            continue
        env_name = spec.metadata.get("env")
        if env_name is not None and env_name in environ:
            setattr(obj, spec.name, _from_environment(environ[env_name], kind, env_name))


def _is_zero(value: Any) -> bool:
    return value is None or (not isinstance(value, bool) and not value)


def _apply_defaults(obj: Any) -> None:
    kinds = _field_kinds(type(obj))
    for spec in dataclasses.fields(obj):
        value = getattr(obj, spec.name)
        if _is_config(kinds[spec.name]):
            if value is not None:
                _apply_defaults(value)
        elif "default" in spec.metadata and _is_zero(value):
            setattr(obj, spec.name, spec.metadata["default"])


def _as_number(value: Any) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _validate(obj: Any, path: str) -> None:
    kinds = _field_kinds(type(obj))
    for spec in dataclasses.fields(obj):
        meta = spec.metadata
        value = getattr(obj, spec.name)
        where = f"{path}{meta['key']}"
        if _is_config(kinds[spec.name]):
            if value is not None:
                _validate(value, f"{where}.")
            continue
        if meta.get("omitempty") and _is_zero(value):
            continue
        choices = meta.get("choices")
        if choices is not None and value not in choices:
            raise ConfigError(f"{where}: {value!r} must be one of {', '.join(choices)}")
        if "ge" in meta and _as_number(value) < meta["ge"]:
            raise ConfigError(f"{where}: must be at least {meta['ge']}")
        if "gt" in meta and _as_number(value) <= meta["gt"]:
            raise ConfigError(f"{where}: must be greater than {meta['gt']}")
        if "le" in meta and _as_number(value) > meta["le"]:
            raise ConfigError(f"{where}: must be at most {meta['le']}")
        condition = meta.get("required_if")
        if condition is not None and getattr(obj, condition) is True and not value:
            raise ConfigError(f"{where}: required when {condition} is true")


def parse_config(
    data: bytes | str, environ: Mapping[str, str] | None = None
) -> TelemetryConfig:
    """Parse a YAML or JSON document into a TelemetryConfig.

    Environment variables (``os.environ`` unless ``environ`` is given)
    override values from the document. Raises ConfigError on failure.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigError(f"config is not valid UTF-8: {exc}") from exc
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse config: {exc}") from exc
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigError("config document must be a mapping")

    cfg = _build(TelemetryConfig, document, "")
    _apply_environment(cfg, os.environ if environ is None else environ)
    _apply_defaults(cfg)
    _validate(cfg, "")
    return cfg


def load_config(
    path: str | os.PathLike[str], environ: Mapping[str, str] | None = None
) -> TelemetryConfig:
    """Read and parse the configuration file at ``path``.

    Raises ConfigError if the file cannot be read or is not a valid config.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ConfigError(f"cannot read config file {os.fspath(path)!r}: {exc}") from exc
    return parse_config(data, environ)