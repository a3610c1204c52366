"""A thread-safe pool of fixed-size byte buffers."""

from __future__ import annotations

import threading


class Buffer:
    """A fixed-size byte buffer handed out by a :class:`Pool`."""

    __slots__ = ("_buf",)

    def __init__(self, size: int) -> None:
        self._buf = bytearray(size)

    def bytes(self) -> bytearray:
        """Return the buffer's storage; it may be written in place."""
        return self._buf


class Pool:
    """A free list of buffers, grown by ``num`` buffers of ``size`` bytes when empty."""

    def __init__(self, num: int, size: int) -> None:
        if num <= 0:
            raise ValueError("pool needs at least one buffer per growth step")
        if size < 0:
            raise ValueError("buffer size must not be negative")
        self._lock = threading.Lock()
        self._num = num
        self._size = size
        self._free: list[Buffer] = []
        self._grow()

    def _grow(self) -> None:
        # Buffers are taken from the end, so keep creation order for get().
        self._free.extend(Buffer(self._size) for _ in range(self._num))
        self._free.reverse()

    def get(self) -> Buffer:
        """Take a free buffer, growing the pool when none is left."""
        with self._lock:
            if not self._free:
                self._grow()
            return self._free.pop()

    def put(self, b: Buffer) -> None:
        """Return a buffer to the pool; it is the next one handed out."""
        with self._lock:
            self._free.append(b)