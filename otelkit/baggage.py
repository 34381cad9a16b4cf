"""Immutable W3C baggage sets."""

from __future__ import annotations

import re
import string
from typing import Iterator, Mapping
from urllib.parse import unquote

__all__ = ["BaggageError", "Baggage"]

_TOKEN_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")
_INVALID_VALUE_CHARS = frozenset(' ",;\\')
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class BaggageError(ValueError):
    """Raised when a baggage key or value violates the W3C Baggage format."""


def _check_key(key: str) -> None:
    if not key or any(ch not in _TOKEN_CHARS for ch in key):
        raise BaggageError(f"invalid baggage key: {key!r}")


def _decode_value(value: str) -> str:
    for ch in value:
        code = ord(ch)
        if code < 0x20 or code == 0x7F or ch in _INVALID_VALUE_CHARS:
            raise BaggageError(f"invalid baggage value: {value!r}")
    if _BAD_ESCAPE.search(value):
        raise BaggageError(f"invalid percent-encoding in baggage value: {value!r}")
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as exc:
        raise BaggageError(f"invalid percent-encoding in baggage value: {value!r}") from exc


class Baggage:
    """An immutable set of baggage members.

    Every change returns a new ``Baggage``; the original is left untouched.
    Values are given percent-encoded and stored decoded.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Mapping[str, str] | None = None) -> None:
        decoded: dict[str, str] = {}
        for key, value in (members or {}).items():
            _check_key(key)
            decoded[key] = _decode_value(value)
        self._members = decoded

    @classmethod
    def _wrap(cls, members: dict[str, str]) -> Baggage:
        bag = cls.__new__(cls)
        bag._members = members
        return bag

    def set(self, key: str, value: str) -> Baggage:
        """Return a copy with ``key`` set to ``value``.

        Raises BaggageError if the key or value is not valid baggage.
        """
        _check_key(key)
        decoded = _decode_value(value)
        members = dict(self._members)
        members[key] = decoded
        return self._wrap(members)

    def get(self, key: str) -> str:
        """Return the value for ``key``, or an empty string if absent."""
        return self._members.get(key, "")

    def delete(self, key: str) -> Baggage:
        """Return a copy without ``key``."""
        members = {k: v for k, v in self._members.items() if k != key}
        return self._wrap(members)

    def as_dict(self) -> dict[str, str]:
        """Return all members as a new dictionary."""
        return dict(self._members)

    def __contains__(self, key: object) -> bool:
        return key in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Baggage):
            return NotImplemented
        return self._members == other._members

    def __hash__(self) -> int:
        return hash(frozenset(self._members.items()))

    def __repr__(self) -> str:
        return f"Baggage({self._members!r})"