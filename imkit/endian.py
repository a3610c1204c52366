"""Big-endian signed integers read from and written into byte buffers."""

import struct

_INT8 = struct.Struct(">b")
_INT16 = struct.Struct(">h")
_INT32 = struct.Struct(">i")


def int8(b) -> int:
    """Decode a signed 8-bit integer from the start of ``b``."""
    return _INT8.unpack_from(b)[0]


def put_int8(b, v: int) -> None:
    """Encode ``v`` as a signed 8-bit integer at the start of ``b``."""
    _INT8.pack_into(b, 0, v)


def int16(b) -> int:
    """Decode a big-endian signed 16-bit integer from the start of ``b``."""
    return _INT16.unpack_from(b)[0]


def put_int16(b, v: int) -> None:
    """Encode ``v`` as a big-endian signed 16-bit integer at the start of ``b``."""
    _INT16.pack_into(b, 0, v)


def int32(b) -> int:
    """Decode a big-endian signed 32-bit integer from the start of ``b``."""
    return _INT32.unpack_from(b)[0]


def put_int32(b, v: int) -> None:
    """Encode ``v`` as a big-endian signed 32-bit integer at the start of ``b``."""
    _INT32.pack_into(b, 0, v)