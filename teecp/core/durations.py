"""Duration option parsing for ``--wait-connection`` and ``--retry-interval``.

Accepts bare integers as seconds (``"5"``) and Go-style duration strings
(``"500ms"``, ``"2m"``, ``"1h30m"``, ``"1.5s"``).
"""

from __future__ import annotations

import re
from datetime import timedelta

# Microseconds per unit; timedelta cannot hold anything finer.
_UNIT_MICROSECONDS: dict[str, float] = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}

_NUMERIC_RE = re.compile(r"^\d+$")
_GROUP_RE = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_RE = re.compile(r"^[-+]?(?:(?:\d+\.?\d*|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+$")

FLAG_DEFAULT = timedelta(seconds=1)


class DurationParseError(ValueError):
    """Raised when a duration option cannot be parsed."""


def parse_duration(text: str) -> timedelta:
    """Parse *text* into a ``timedelta``.

    >>> parse_duration("5")
    datetime.timedelta(seconds=5)
    >>> parse_duration("500ms")
    datetime.timedelta(microseconds=500000)

    Raises
    ------
    DurationParseError
        For empty input or anything outside the accepted syntax.
    """
    raw = text.strip()
    if _NUMERIC_RE.match(raw):
        return timedelta(seconds=int(raw))

    if not _DURATION_RE.match(raw):
        raise DurationParseError(f"invalid duration: {text!r}")

    sign = -1 if raw.startswith("-") else 1
    micros = sum(
        float(value) * _UNIT_MICROSECONDS[unit]
        for value, unit in _GROUP_RE.findall(raw)
    )
    return timedelta(microseconds=sign * micros)


def parse_duration_flag(text: str) -> timedelta:
    """Parse the value of a duration flag; a bare ``true`` means one second."""
    if text == "true":
        return FLAG_DEFAULT
    return parse_duration(text)
