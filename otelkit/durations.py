"""Parsing and formatting of duration strings such as ``"1m30s"``."""

from __future__ import annotations

import re
from datetime import timedelta

__all__ = ["parse_duration", "format_duration"]

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_MAX_NS = (1 << 63) - 1

_UNITS = {
    "ns": 1,
    "us": _NS_PER_US,
    "\u00b5s": _NS_PER_US,
    "\u03bcs": _NS_PER_US,
    "ms": _NS_PER_MS,
    "s": _NS_PER_S,
    "m": 60 * _NS_PER_S,
    "h": 3600 * _NS_PER_S,
}

_COMPONENT = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]+)")


def _nanoseconds_to_timedelta(ns: int) -> timedelta:
    sign = -1 if ns < 0 else 1
    micros, rest = divmod(abs(ns), _NS_PER_US)
    if rest * 2 >= _NS_PER_US:
        micros += 1
    return timedelta(microseconds=sign * micros)


def _timedelta_to_nanoseconds(value: timedelta) -> int:
    return ((value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds) * _NS_PER_US


def parse_duration(text: str) -> timedelta:
    """Parse a duration like ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``.
    Raises ValueError for malformed input.
    """
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"invalid duration {text!r}")

    total = 0
    pos = 0
    while pos < len(rest):
        match = _COMPONENT.match(rest, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        whole, fraction, unit_name = match.group(1), match.group(2) or "", match.group(3)
        if not whole and not fraction:
            raise ValueError(f"invalid duration {text!r}")
        unit = _UNITS.get(unit_name)
        if unit is None:
            raise ValueError(f"unknown unit {unit_name!r} in duration {text!r}")
        total += int(whole or "0") * unit
        if fraction:
            total += int(fraction) * unit // 10 ** len(fraction)
        pos = match.end()

    limit = _MAX_NS + 1 if negative else _MAX_NS
    if total > limit:
        raise ValueError(f"invalid duration {text!r}")
    return _nanoseconds_to_timedelta(-total if negative else total)


def _with_fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    digits = str(frac).zfill(precision).rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(value: timedelta) -> str:
    """Format a duration in the ``"1h2m3.5s"`` style; zero is ``"0s"``."""
    ns = _timedelta_to_nanoseconds(value)
    sign = "-" if ns < 0 else ""
    magnitude = abs(ns)

    if magnitude == 0:
        return "0s"
    if magnitude < _NS_PER_US:
        return f"{sign}{magnitude}ns"
    if magnitude < _NS_PER_MS:
        return f"{sign}{_with_fraction(magnitude, 3)}\u00b5s"
    if magnitude < _NS_PER_S:
        return f"{sign}{_with_fraction(magnitude, 6)}ms"

    total_seconds, sub_second = divmod(magnitude, _NS_PER_S)
    minutes, seconds = divmod(total_seconds, 60)
    body = _with_fraction(seconds * _NS_PER_S + sub_second, 9) + "s"
    if minutes:
        hours, minutes = divmod(minutes, 60)
        body = f"{minutes}m{body}"
        if hours:
            body = f"{hours}h{body}"
    return sign + body