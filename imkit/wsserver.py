"""Server side of the WebSocket opening handshake."""

from __future__ import annotations

import base64
import hashlib

from imkit.bufio import Reader, Writer
from imkit.wsconn import Conn
from imkit.wsrequest import Request

_KEY_GUID = b"258EAFA5-E914-47DA-95CA-C5AB0DC85B11"


class UpgradeError(Exception):
    """The request cannot be upgraded to a WebSocket connection."""


class BadRequestMethodError(UpgradeError):
    """The request method is not GET."""

    def __init__(self) -> None:
        super().__init__("bad method")


class NotWebSocketError(UpgradeError):
    """The request does not ask for the WebSocket protocol."""

    def __init__(self) -> None:
        super().__init__("not websocket protocol")


class BadWebSocketVersionError(UpgradeError):
    """The WebSocket version header is missing or not 13."""

    def __init__(self) -> None:
        super().__init__("missing or bad WebSocket Version")


class ChallengeResponseError(UpgradeError):
    """The challenge key is missing."""

    def __init__(self) -> None:
        super().__init__("mismatch challenge/response")


def compute_accept_key(challenge_key: str) -> str:
    """Return the Sec-WebSocket-Accept value for a challenge key."""
    digest = hashlib.sha1(challenge_key.encode("latin-1") + _KEY_GUID).digest()
    return base64.b64encode(digest).decode("ascii")


def upgrade(rwc, reader: Reader, writer: Writer, req: Request) -> Conn:
    """Validate the handshake request, send the 101 response and return a Conn."""
    header = req.header
    if req.method != "GET":
        raise BadRequestMethodError()
    if header.get("Sec-Websocket-Version", "") != "13":
        raise BadWebSocketVersionError()
    if header.get("Upgrade", "").lower() != "websocket":
        raise NotWebSocketError()
    if "upgrade" not in header.get("Connection", "").lower():
        raise NotWebSocketError()
    challenge_key = header.get("Sec-Websocket-Key", "")
    if not challenge_key:
        raise ChallengeResponseError()
    writer.write_string(
        "HTTP/1.1 101 Switching Protocols\r\nUpgrade: websocket\r\nConnection: Upgrade\r\n"
    )
    writer.write_string(
        "Sec-WebSocket-Accept: " + compute_accept_key(challenge_key) + "\r\n\r\n"
    )
    writer.flush()
    return Conn(rwc, reader, writer)