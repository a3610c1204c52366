"""Joining integer lists into strings and splitting them back."""

from __future__ import annotations

import re
from collections.abc import Iterable

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _join(values: Iterable[int], sep: str) -> str:
    return sep.join(str(int(v)) for v in values)


def _split(s: str, sep: str, bits: int) -> list[int]:
    if s == "":
        return []
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    result = []
    for part in s.split(sep):
        if not _INTEGER.fullmatch(part):
            raise ValueError(f"invalid syntax: {part!r}")
        value = int(part)
        if not low <= value <= high:
            raise ValueError(f"value out of range for int{bits}: {part!r}")
        result.append(value)
    return result


def join_int32s(values: Iterable[int], sep: str) -> str:
    """Format integers as ``n1<sep>n2<sep>n3``."""
    return _join(values, sep)


def split_int32s(s: str, sep: str) -> list[int]:
    """Parse a ``sep``-separated list of 32-bit integers; ``""`` gives ``[]``."""
    return _split(s, sep, 32)


def join_int64s(values: Iterable[int], sep: str) -> str:
    """Format integers as ``n1<sep>n2<sep>n3``."""
    return _join(values, sep)


def split_int64s(s: str, sep: str) -> list[int]:
    """Parse a ``sep``-separated list of 64-bit integers; ``""`` gives ``[]``."""
    return _split(s, sep, 64)