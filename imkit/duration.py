"""Parsing of duration strings such as ``"1s"``, ``"500ms"`` or ``"1h30m"``."""

from __future__ import annotations

import re
from datetime import timedelta
from fractions import Fraction

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_NUMBER = re.compile(r"([0-9]*)(?:\.([0-9]*))?")
_UNIT = re.compile(r"[^0-9.]*")
_MAX_NS = (1 << 63) - 1


def _nanoseconds(text: str) -> int:
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ValueError(f"time: invalid duration {text!r}")
    limit = _MAX_NS + (1 if negative else 0)
    total = Fraction(0)
    pos = 0
    while pos < len(s):
        number = _NUMBER.match(s, pos)
        whole, frac = number.group(1), number.group(2)
        if not whole and not frac:
            raise ValueError(f"time: invalid duration {text!r}")
        pos = number.end()
        unit = _UNIT.match(s, pos).group()
        if not unit:
            raise ValueError(f"time: missing unit in duration {text!r}")
        pos += len(unit)
        scale = _UNITS.get(unit)
        if scale is None:
            raise ValueError(f"time: unknown unit {unit!r} in duration {text!r}")
        value = Fraction(int(whole or "0"))
        if frac:
            value += Fraction(int(frac), 10 ** len(frac))
        total += value * scale
        if total > limit:
            raise ValueError(f"time: invalid duration {text!r}")
    ns = int(total)
    return -ns if negative else ns


def parse_duration(text) -> timedelta:
    """Parse a signed sequence of decimal numbers with units into a timedelta.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``.
    Raises ``ValueError`` for malformed input.
    """
    if isinstance(text, (bytes, bytearray, memoryview)):
        text = bytes(text).decode("utf-8")
    ns = _nanoseconds(text)
    seconds, rest = divmod(ns, 1_000_000_000)
    return timedelta(seconds=seconds, microseconds=rest / 1000)