"""WebSocket framing over buffered streams."""

from __future__ import annotations

import enum
import struct

from imkit.bufio import Reader, Writer

_FIN_BIT = 1 << 7
_RSV1_BIT = 1 << 6
_RSV2_BIT = 1 << 5
_RSV3_BIT = 1 << 4
_OP_BITS = 0x0F

_MASK_BIT = 1 << 7
_LEN_BITS = 0x7F

CONTINUATION_FRAME_MAX_READ = 100

_UINT16 = struct.Struct(">H")
_UINT64 = struct.Struct(">Q")


class MessageType(enum.IntEnum):
    """Frame opcodes defined by the WebSocket protocol."""

    CONTINUATION = 0
    TEXT = 1
    BINARY = 2
    CLOSE = 8
    PING = 9
    PONG = 10


class MessageCloseError(Exception):
    """The peer sent a close control message."""

    def __init__(self) -> None:
        super().__init__("close control message")


class MessageMaxReadError(Exception):
    """Too many frames were read without completing a message."""

    def __init__(self) -> None:
        super().__init__("continuation frame max read")


class ProtocolError(Exception):
    """A frame violated the WebSocket framing rules."""


def _mask_bytes(key: bytes, data: bytes) -> bytes:
    return bytes(c ^ key[i & 3] for i, c in enumerate(data))


class Conn:
    """A WebSocket connection reading and writing through buffered streams."""

    def __init__(self, rwc, reader: Reader, writer: Writer) -> None:
        self._rwc = rwc
        self._reader = reader
        self._writer = writer

    def write_message(self, msg_type, msg) -> None:
        """Buffer a complete unfragmented frame of type ``msg_type``."""
        data = bytes(msg)
        self.write_header(msg_type, len(data))
        self.write_body(data)

    def write_header(self, msg_type, length: int) -> None:
        """Buffer a final-frame header for a payload of ``length`` bytes."""
        head = self._writer.peek(2)
        head[0] = _FIN_BIT | (int(msg_type) & 0xFF)
        if length <= 125:
            head[1] = length
        elif length < 65536:
            head[1] = 126
            self._writer.peek(2)[:] = _UINT16.pack(length)
        else:
            head[1] = 127
            self._writer.peek(8)[:] = _UINT64.pack(length)

    def write_body(self, b) -> None:
        """Buffer payload bytes."""
        if b:
            self._writer.write(b)

    def peek(self, n: int) -> memoryview:
        """Reserve ``n`` bytes of the write buffer for filling in place."""
        return self._writer.peek(n)

    def flush(self) -> None:
        """Write out everything buffered."""
        self._writer.flush()

    def read_message(self) -> tuple[MessageType, bytes]:
        """Read one data message, joining fragments and answering pings.

        Raises :class:`MessageCloseError` on a close frame,
        :class:`ProtocolError` on an unknown opcode or reserved bits and
        :class:`MessageMaxReadError` when too many frames arrive.
        """
        payload = bytearray()
        fin_op = MessageType.CONTINUATION
        count = 0
        while True:
            fin, op, part = self._read_frame()
            if op in (MessageType.BINARY, MessageType.TEXT, MessageType.CONTINUATION):
                if fin and not payload:
                    return MessageType(op), part
                payload += part
                if op != MessageType.CONTINUATION:
                    fin_op = MessageType(op)
                if fin:
                    return fin_op, bytes(payload)
            elif op == MessageType.PING:
                self.write_message(MessageType.PONG, part)
            elif op == MessageType.PONG:
                pass
            elif op == MessageType.CLOSE:
                raise MessageCloseError()
            else:
                raise ProtocolError(
                    f"unknown control message, fin={str(fin).lower()}, op={op}"
                )
            if count > CONTINUATION_FRAME_MAX_READ:
                raise MessageMaxReadError()
            count += 1

    def _read_frame(self) -> tuple[bool, int, bytes]:
        b = self._reader.read_byte()
        fin = bool(b & _FIN_BIT)
        if b & (_RSV1_BIT | _RSV2_BIT | _RSV3_BIT):
            raise ProtocolError(
                "unexpected reserved bits "
                f"rsv1={b & _RSV1_BIT}, rsv2={b & _RSV2_BIT}, rsv3={b & _RSV3_BIT}"
            )
        op = b & _OP_BITS
        b = self._reader.read_byte()
        masked = bool(b & _MASK_BIT)
        length = b & _LEN_BITS
        if length == 126:
            (length,) = _UINT16.unpack(self._reader.pop(2))
        elif length == 127:
            (length,) = _UINT64.unpack(self._reader.pop(8))
        key = self._reader.pop(4) if masked else b""
        payload = b""
        if length > 0:
            payload = self._reader.pop(length)
            if masked:
                payload = _mask_bytes(key, payload)
        return fin, op, payload

    def close(self) -> None:
        """Close the underlying stream."""
        self._rwc.close()