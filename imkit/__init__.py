"""Building blocks for instant-messaging servers: buffered I/O, buffer pools, timers and WebSocket framing."""

__version__ = "0.1.0"
__all__ = [
    "bufio",
    "endian",
    "bufpool",
    "writer",
    "ints",
    "ip",
    "duration",
    "timer",
    "wsconn",
    "wsrequest",
    "wsserver",
]