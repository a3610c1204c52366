"""Buffered reading and writing on top of binary streams.

A :class:`Reader` wraps any object with a ``read(n)`` method that returns
``bytes`` (``b""`` at end of stream, ``None`` when no data is available yet).
A :class:`Writer` wraps any object with a ``write(data)`` method that returns
the number of bytes written (``None`` is taken to mean "all of it").
Errors raised by the wrapped stream are kept and reported by the next call
that needs them.
"""

from __future__ import annotations

DEFAULT_BUF_SIZE = 4096
MIN_READ_BUFFER_SIZE = 16
MAX_CONSECUTIVE_EMPTY_READS = 100


class BufioError(Exception):
    """Base class for buffered I/O errors."""


class BufferFullError(BufioError):
    """The buffer filled up before the request could be satisfied.

    ``data`` holds whatever was taken out of the buffer, if anything.
    """

    def __init__(self, data: bytes = b"") -> None:
        super().__init__("bufio: buffer full")
        self.data = bytes(data)


class NegativeCountError(BufioError, ValueError):
    """A negative byte count was requested."""

    def __init__(self) -> None:
        super().__init__("bufio: negative count")


class NoProgressError(BufioError):
    """The wrapped reader kept returning no data and no error."""

    def __init__(self) -> None:
        super().__init__("multiple read calls return no data or error")


class ShortWriteError(BufioError):
    """The wrapped writer accepted fewer bytes than it was given."""

    def __init__(self) -> None:
        super().__init__("short write")


def _delim_byte(delim) -> int:
    if isinstance(delim, int):
        if not 0 <= delim <= 0xFF:
            raise ValueError(f"delimiter out of byte range: {delim}")
        return delim
    data = bytes(delim)
    if len(data) != 1:
        raise ValueError("delimiter must be a single byte")
    return data[0]


class Reader:
    """Buffered reader over a stream with a ``read(n)`` method."""

    def __init__(self, rd, size: int = DEFAULT_BUF_SIZE) -> None:
        self._set(bytearray(max(size, MIN_READ_BUFFER_SIZE)), rd)

    def _set(self, buf: bytearray, rd) -> None:
        self._buf = buf
        self._rd = rd
        self._r = 0
        self._w = 0
        self._err: BaseException | None = None

    def reset(self, rd) -> None:
        """Drop buffered data and state and read from ``rd`` from now on."""
        self._set(self._buf, rd)

    def reset_buffer(self, rd, buf) -> None:
        """Like :meth:`reset`, but also switch to the buffer ``buf``."""
        self._set(buf if isinstance(buf, bytearray) else bytearray(buf), rd)

    def _raw_read(self, n: int) -> tuple[bytes, BaseException | None]:
        try:
            data = self._rd.read(n)
        except Exception as exc:  # kept and reported later
            return b"", exc
        if data is None:
            return b"", None
        if len(data) > n:
            raise ValueError("bufio: reader returned more bytes than requested")
        if not data:
            return b"", EOFError()
        return bytes(data), None

    def _fill(self) -> None:
        if self._r > 0:
            pending = self._w - self._r
            self._buf[:pending] = self._buf[self._r : self._w]
            self._w = pending
            self._r = 0
        if self._w >= len(self._buf):
            raise RuntimeError("bufio: tried to fill full buffer")
        for _ in range(MAX_CONSECUTIVE_EMPTY_READS):
            data, err = self._raw_read(len(self._buf) - self._w)
            self._buf[self._w : self._w + len(data)] = data
            self._w += len(data)
            if err is not None:
                self._err = err
                return
            if data:
                return
        self._err = NoProgressError()

    def _read_err(self) -> BaseException | None:
        err, self._err = self._err, None
        return err

    def _eof_or_raise(self) -> bytes:
        err = self._read_err()
        if err is None or isinstance(err, EOFError):
            return b""
        raise err

    def buffered(self) -> int:
        """Number of bytes that can be read from the buffer right now."""
        return self._w - self._r

    def peek(self, n: int) -> bytes:
        """Return the next ``n`` bytes without consuming them."""
        if n < 0:
            raise NegativeCountError()
        if n > len(self._buf):
            raise BufferFullError()
        while self._w - self._r < n and self._err is None:
            self._fill()
        if self._w - self._r < n:
            err = self._read_err()
            if err is None:
                err = BufferFullError(self._buf[self._r : self._w])
            raise err
        return bytes(self._buf[self._r : self._r + n])

    def pop(self, n: int) -> bytes:
        """Return the next ``n`` bytes and consume them."""
        data = self.peek(n)
        self._r += n
        return data

    def discard(self, n: int) -> int:
        """Skip ``n`` bytes; return how many were skipped (fewer at end of stream)."""
        if n < 0:
            raise NegativeCountError()
        remain = n
        while remain:
            skip = self.buffered()
            if skip == 0:
                self._fill()
                skip = self.buffered()
            skip = min(skip, remain)
            self._r += skip
            remain -= skip
            if remain == 0:
                break
            if self._err is not None:
                err = self._read_err()
                if isinstance(err, EOFError):
                    return n - remain
                raise err
        return n

    def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes, calling the wrapped reader at most once.

        Returns ``b""`` at end of stream.
        """
        if n < 0:
            raise NegativeCountError()
        if n == 0:
            err = self._read_err()
            if err is not None and not isinstance(err, EOFError):
                raise err
            return b""
        if self._r == self._w:
            if self._err is not None:
                return self._eof_or_raise()
            if n >= len(self._buf):
                # Large read with an empty buffer: skip the copy.
                data, err = self._raw_read(n)
                if data:
                    return data
                if err is not None:
                    self._err = err
                    return self._eof_or_raise()
            self._fill()
            if self._r == self._w:
                return self._eof_or_raise()
        count = min(n, self._w - self._r)
        data = bytes(self._buf[self._r : self._r + count])
        self._r += count
        return data

    def read_byte(self) -> int:
        """Read and return a single byte."""
        while self._r == self._w:
            if self._err is not None:
                raise self._read_err()
            self._fill()
        c = self._buf[self._r]
        self._r += 1
        return c

    def _read_slice(self, delim: int) -> tuple[bytes, BaseException | None]:
        while True:
            i = self._buf.find(delim, self._r, self._w)
            if i >= 0:
                line = bytes(self._buf[self._r : i + 1])
                self._r = i + 1
                return line, None
            if self._err is not None:
                line = bytes(self._buf[self._r : self._w])
                self._r = self._w
                return line, self._read_err()
            if self.buffered() >= len(self._buf):
                line = bytes(self._buf[self._r : self._w])
                self._r = self._w
                return line, BufferFullError(line)
            self._fill()

    def read_slice(self, delim) -> bytes:
        """Read up to and including the first ``delim`` byte.

        A result not ending in ``delim`` means the stream ended.  When the
        buffer fills without a delimiter, :class:`BufferFullError` is raised
        carrying the buffered bytes.
        """
        line, err = self._read_slice(_delim_byte(delim))
        if err is None:
            return line
        if isinstance(err, BufferFullError):
            raise err
        if line:
            self._err = err
            return line
        raise err

    def read_line(self) -> tuple[bytes, bool]:
        """Read one line without its line ending.

        Returns ``(line, is_prefix)``; ``is_prefix`` is true when the line was
        longer than the buffer and the rest follows in later calls.  Raises
        ``EOFError`` when no data is left.
        """
        line, err = self._read_slice(0x0A)
        if isinstance(err, BufferFullError):
            # A "\r\n" may straddle the buffer: keep the '\r' for next time.
            if line and line[-1] == 0x0D:
                if self._r == 0:
                    raise RuntimeError("bufio: tried to rewind past start of buffer")
                self._r -= 1
                line = line[:-1]
            return line, True
        if not line:
            if err is not None:
                raise err
            return line, False
        if line.endswith(b"\r\n"):
            line = line[:-2]
        elif line.endswith(b"\n"):
            line = line[:-1]
        return line, False


class Writer:
    """Buffered writer over a stream with a ``write(data)`` method.

    After an error, no more data is accepted and every later call reports
    the same error.
    """

    def __init__(self, wr, size: int = DEFAULT_BUF_SIZE) -> None:
        if size <= 0:
            size = DEFAULT_BUF_SIZE
        self._buf = bytearray(size)
        self._n = 0
        self._wr = wr
        self._err: BaseException | None = None

    def reset(self, wr) -> None:
        """Drop unflushed data, clear any error and write to ``wr``."""
        self._err = None
        self._n = 0
        self._wr = wr

    def reset_buffer(self, wr, buf) -> None:
        """Like :meth:`reset`, but also switch to the buffer ``buf``."""
        self._buf = buf if isinstance(buf, bytearray) else bytearray(buf)
        self.reset(wr)

    def _raw_write(self, data: bytes) -> tuple[int, BaseException | None]:
        try:
            n = self._wr.write(data)
        except Exception as exc:  # kept and reported later
            return 0, exc
        if n is None:
            n = len(data)
        return n, None

    def _flush(self) -> BaseException | None:
        if self._err is not None:
            return self._err
        if self._n == 0:
            return None
        n, err = self._raw_write(bytes(self._buf[: self._n]))
        if n < self._n and err is None:
            err = ShortWriteError()
        if err is not None:
            if 0 < n < self._n:
                self._buf[: self._n - n] = self._buf[n : self._n]
            self._n -= n
            self._err = err
            return err
        self._n = 0
        return None

    def flush(self) -> None:
        """Write any buffered data to the wrapped writer."""
        err = self._flush()
        if err is not None:
            raise err

    def available(self) -> int:
        """Number of unused bytes in the buffer."""
        return len(self._buf) - self._n

    def buffered(self) -> int:
        """Number of bytes written into the buffer and not yet flushed."""
        return self._n

    def _copy_in(self, data: bytes) -> int:
        count = min(len(data), self.available())
        self._buf[self._n : self._n + count] = data[:count]
        self._n += count
        return count

    def write(self, p) -> int:
        """Buffer ``p``, flushing as needed; return the number of bytes taken."""
        data = bytes(p)
        total = 0
        while len(data) > self.available() and self._err is None:
            if self.buffered() == 0:
                # Large write with an empty buffer: skip the copy.
                n, self._err = self._raw_write(data)
                if n == 0 and self._err is None:
                    self._err = ShortWriteError()
            else:
                n = self._copy_in(data)
                self._flush()
            total += n
            data = data[n:]
        if self._err is not None:
            raise self._err
        return total + self._copy_in(data)

    def write_raw(self, p) -> int:
        """Write ``p`` straight to the wrapped writer when nothing is buffered."""
        if self._err is not None:
            raise self._err
        if self.buffered() == 0:
            n, self._err = self._raw_write(bytes(p))
            if self._err is not None:
                raise self._err
            return n
        return self.write(p)

    def peek(self, n: int) -> memoryview:
        """Reserve the next ``n`` bytes of the buffer and return them for filling."""
        if n < 0:
            raise NegativeCountError()
        if n > len(self._buf):
            raise BufferFullError()
        while self.available() < n and self._err is None:
            self._flush()
        if self._err is not None:
            raise self._err
        view = memoryview(self._buf)[self._n : self._n + n]
        self._n += n
        return view

    def write_string(self, s) -> int:
        """Buffer a string (UTF-8 encoded) or bytes; return the byte count."""
        data = s.encode("utf-8") if isinstance(s, str) else bytes(s)
        total = 0
        while len(data) > self.available() and self._err is None:
            n = self._copy_in(data)
            total += n
            data = data[n:]
            self._flush()
        if self._err is not None:
            raise self._err
        return total + self._copy_in(data)


def new_reader_size(rd, size: int) -> Reader:
    """Return a Reader with a buffer of at least ``size`` bytes.

    If ``rd`` already is a Reader with a large enough buffer, it is returned.
    """
    if isinstance(rd, Reader) and len(rd._buf) >= size:
        return rd
    return Reader(rd, size)


def new_reader(rd) -> Reader:
    """Return a Reader with the default buffer size."""
    return new_reader_size(rd, DEFAULT_BUF_SIZE)


def new_writer_size(wr, size: int) -> Writer:
    """Return a Writer with a buffer of at least ``size`` bytes.

    If ``wr`` already is a Writer with a large enough buffer, it is returned.
    """
    if isinstance(wr, Writer) and len(wr._buf) >= size:
        return wr
    return Writer(wr, size)


def new_writer(wr) -> Writer:
    """Return a Writer with the default buffer size."""
    return new_writer_size(wr, DEFAULT_BUF_SIZE)