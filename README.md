# imkit

Small building blocks for instant-messaging servers.

| Module | What it gives you |
| --- | --- |
| `imkit.bufio` | Buffered `Reader` and `Writer` over any object with `read(n)` / `write(data)` |
| `imkit.endian` | Big-endian signed `int8`/`int16`/`int32` decoding and `put_*` encoding |
| `imkit.bufpool` | A thread-safe `Pool` of fixed-size `Buffer` objects |
| `imkit.writer` | A growable in-memory byte `Writer` |
| `imkit.ints` | `join_int32s`, `split_int32s`, `join_int64s`, `split_int64s` |
| `imkit.ip` | `internal_ip()`: first non-loopback IPv4 address of an up, non-`lo` interface |
| `imkit.duration` | `parse_duration("1m30s")` returns a `datetime.timedelta` |
| `imkit.timer` | A min-heap `Timer` that runs callbacks on a background thread |
| `imkit.wsrequest` | `read_request(reader)` parses an HTTP request line and headers |
| `imkit.wsserver` | `upgrade(...)` completes the WebSocket handshake; `compute_accept_key` |
| `imkit.wsconn` | `Conn` reads and writes WebSocket frames; `MessageType` opcodes |

## Installation

```
pip install .
```

## Buffered I/O

`Reader(rd, size)` wraps a stream whose `read(n)` returns bytes (`b""` at end
of stream, `None` when nothing is available yet). It offers `peek`, `pop`,
`discard`, `read`, `read_byte`, `read_slice` and `read_line`, which returns
`(line, is_prefix)` and raises `EOFError` when nothing is left. Requests that
cannot fit in the buffer raise `BufferFullError`; negative counts raise
`NegativeCountError`.

`Writer(wr, size)` buffers `write`, `write_string` and `write_raw` and sends
data on `flush()`. Once the wrapped writer fails (or accepts fewer bytes than
given, `ShortWriteError`), every later call raises the same error until
`reset`.

```python
import io
from imkit.bufio import new_reader, new_writer

reader = new_reader(io.BytesIO(b"GET / HTTP/1.1\r\n"))
line, is_prefix = reader.read_line()   # (b"GET / HTTP/1.1", False)

out = io.BytesIO()
writer = new_writer(out)
writer.write_string("hello")
writer.flush()
```

## Example: a WebSocket echo handler

```python
from imkit.bufio import new_reader, new_writer
from imkit.wsrequest import read_request
from imkit.wsserver import upgrade
from imkit.wsconn import MessageType


def handle(sock):
    stream = sock.makefile("rwb", buffering=0)
    reader = new_reader(stream)
    writer = new_writer(stream)
    req = read_request(reader)
    conn = upgrade(stream, reader, writer, req)
    op, payload = conn.read_message()
    conn.write_message(MessageType.BINARY, payload)
    conn.flush()
    conn.close()
```

`upgrade` raises a subclass of `UpgradeError` (`BadRequestMethodError`,
`BadWebSocketVersionError`, `NotWebSocketError`, `ChallengeResponseError`)
when the request is not a valid version-13 handshake. `Conn.read_message`
joins fragmented frames, answers pings with pongs (buffered until the next
`flush`), raises `MessageCloseError` on a close frame, `ProtocolError` on
reserved bits or an unknown opcode, and `MessageMaxReadError` after too many
frames without a complete message.

## Example: timers

```python
from datetime import timedelta
from imkit.timer import Timer

timer = Timer(64)
td = timer.add(timedelta(seconds=5), lambda: print("expired"))
timer.set(td, timedelta(seconds=10))   # push it back
timer.delete(td)                       # or cancel it
timer.close()                          # pending callbacks are not run
```

`Timer` is also a context manager that closes itself on exit, and
`len(timer)` gives the number of pending entries. Deadlines may be given as a
`timedelta` or as seconds.

## What it does not do

imkit has no command-line program and runs no server of its own: it does not
listen on sockets or accept connections. The WebSocket layer handles only the
server side of the handshake and plain framing; it has no client, no TLS, no
extensions or compression, and does not send close frames. Nothing here stores
messages or sessions.

## Running the tests

```
pip install .[test]
pytest
```