"""A growable in-memory byte writer."""

from __future__ import annotations


class Writer:
    """Appends bytes to an internal buffer that doubles when it runs short."""

    def __init__(self, n: int) -> None:
        self._buf = bytearray(n)
        self._n = 0

    def __len__(self) -> int:
        return self._n

    def size(self) -> int:
        """Capacity of the internal buffer."""
        return len(self._buf)

    def reset(self) -> None:
        """Forget the written data, keeping the capacity."""
        self._n = 0

    def buffer(self) -> bytes:
        """Return the bytes written so far."""
        return bytes(self._buf[: self._n])

    def peek(self, n: int) -> memoryview:
        """Reserve ``n`` bytes at the end and return them for filling in place."""
        if n < 0:
            raise ValueError("peek count must not be negative")
        self._grow(n)
        view = memoryview(self._buf)[self._n : self._n + n]
        self._n += n
        return view

    def write(self, p) -> None:
        """Append ``p``."""
        data = memoryview(p).cast("B")
        self._grow(len(data))
        self._buf[self._n : self._n + len(data)] = data
        self._n += len(data)

    def _grow(self, n: int) -> None:
        if self._n + n < len(self._buf):
            return
        buf = bytearray(2 * len(self._buf) + n)
        buf[: self._n] = self._buf[: self._n]
        self._buf = buf