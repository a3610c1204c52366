"""Reading the HTTP request that opens a WebSocket handshake."""

from __future__ import annotations

from dataclasses import dataclass, field
from email.message import Message

from imkit.bufio import Reader

_BLANKS = b" \t"


@dataclass
class Request:
    """An HTTP request line and its headers.

    ``header`` is case-insensitive; ``header.get(name)`` gives the first
    value and ``header.get_all(name)`` every value.
    """

    method: str = ""
    request_uri: str = ""
    proto: str = ""
    host: str = ""
    header: Message = field(default_factory=Message)


def _read_line(reader: Reader) -> bytes:
    line, more = reader.read_line()
    if not more:
        return line
    parts = [line]
    while more:
        line, more = reader.read_line()
        parts.append(line)
    return b"".join(parts)


def _parse_request_line(line: str) -> tuple[str, str, str]:
    method, sep1, rest = line.partition(" ")
    uri, sep2, proto = rest.partition(" ")
    if not sep1 or not sep2:
        raise ValueError(f"malformed HTTP request {line}")
    return method, uri, proto


def _read_header(reader: Reader) -> Message:
    header = Message()
    while True:
        line = _read_line(reader).strip(_BLANKS)
        if not line:
            return header
        i = line.find(b":")
        if i <= 0:
            raise ValueError("malformed MIME header line: " + line.decode("latin-1"))
        key = line[:i].decode("latin-1")
        value = line[i + 1 :].lstrip(_BLANKS).decode("latin-1")
        header[key] = value


def read_request(reader: Reader) -> Request:
    """Read a request line and headers from ``reader``.

    Raises ``ValueError`` for a malformed request and ``EOFError`` when the
    stream ends early.
    """
    line = _read_line(reader).decode("latin-1")
    method, uri, proto = _parse_request_line(line)
    header = _read_header(reader)
    return Request(
        method=method,
        request_uri=uri,
        proto=proto,
        host=header.get("Host", ""),
        header=header,
    )