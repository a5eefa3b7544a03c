"""
Immutable configuration snapshot with dotted-key access.

A snapshot wraps one parsed configuration document. It is frozen at
construction and replaced wholesale on reload; stages only ever read it.
The fingerprint (SHA-256 of the canonical JSON) identifies the version.
"""

from __future__ import annotations

import copy
import hashlib
import json
import re
from datetime import timedelta
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

# Go-style duration components: "1h30m", "500ms", "1.5s"
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_MISSING = object()


def parse_duration(value: Any) -> timedelta:
    """
    Parse a duration.

    Accepts timedelta, a number of seconds, or a Go-style duration string.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip()
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise ValueError(f"invalid duration: {value!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")

    return timedelta(seconds=sign * total)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class ConfigSnapshot:
    """Read-only view of one configuration document."""

    def __init__(self, data: Mapping[str, Any], source: Optional[str] = None):
        """
        Args:
            data: Parsed configuration document (nested mappings)
            source: Where the document came from (file path), for logs
        """
        plain = copy.deepcopy(_thaw(data))
        self._data = _freeze(plain)
        self.source = source
        canonical = json.dumps(plain, sort_keys=True, default=str, separators=(",", ":"))
        self.fingerprint = hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def string(self, key: str, default: str = "") -> str:
        value = self._lookup(key)
        if value is _MISSING or value is None or isinstance(value, (Mapping, tuple)):
            return default
        return str(value)

    def strings(self, key: str) -> List[str]:
        """List of strings at key. A single string becomes a one-item list."""
        value = self._lookup(key)
        if value is _MISSING or value is None:
            return []
        if isinstance(value, tuple):
            return [str(v) for v in value]
        if isinstance(value, str):
            return [value] if value else []
        return []

    def duration(self, key: str) -> timedelta:
        """Duration at key; zero if missing or unparsable."""
        value = self._lookup(key)
        if value is _MISSING:
            return timedelta(0)
        try:
            return parse_duration(value)
        except ValueError:
            return timedelta(0)

    def as_dict(self) -> dict:
        """Plain, mutable deep copy of the document."""
        return _thaw(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigSnapshot):
            return NotImplemented
        return self.fingerprint == other.fingerprint

    def __hash__(self) -> int:
        return hash(self.fingerprint)

    def __repr__(self) -> str:
        return f"ConfigSnapshot(source={self.source}, fingerprint={self.fingerprint[:8]})"
