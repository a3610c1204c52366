import io
import socket

import pytest

from imkit.bufio import new_reader, new_writer
from imkit.wsconn import MessageType
from imkit.wsrequest import read_request
from imkit.wsserver import (
    BadRequestMethodError,
    BadWebSocketVersionError,
    ChallengeResponseError,
    NotWebSocketError,
    UpgradeError,
    compute_accept_key,
    upgrade,
)

SAMPLE_KEY = "dGhlIHNhbXBsZSBub25jZQ=="


def _handshake(method="GET", version="13", upgrade_to="websocket",
               connection="Upgrade", key=SAMPLE_KEY):
    lines = [f"{method} /sub HTTP/1.1", "Host: 127.0.0.1:8080"]
    if upgrade_to is not None:
        lines.append(f"Upgrade: {upgrade_to}")
    if connection is not None:
        lines.append(f"Connection: {connection}")
    if key is not None:
        lines.append(f"Sec-WebSocket-Key: {key}")
    if version is not None:
        lines.append(f"Sec-WebSocket-Version: {version}")
    lines.append("Origin: *")
    return ("\r\n".join(lines) + "\r\n\r\n").encode()


def _prepare(data):
    src = io.BytesIO(data)
    out = io.BytesIO()
    reader = new_reader(src)
    writer = new_writer(out)
    return src, reader, writer, read_request(reader), out


def test_compute_accept_key_rfc_example():
    assert compute_accept_key(SAMPLE_KEY) == "s3pPLMBiTxaQ9kBsZzOk+xo="


def test_upgrade_writes_response():
    src, reader, writer, req, out = _prepare(_handshake())
    conn = upgrade(src, reader, writer, req)
    raw = out.getvalue()
    assert raw.startswith(b"HTTP/1.1 101 Switching Protocols\r\n")
    assert b"Sec-WebSocket-Accept: s3pPLMBiTxaQ9kBsZzOk+xo=\r\n\r\n" in raw
    conn.write_message(MessageType.BINARY, b"\x00\x01\x02")
    conn.flush()
    assert out.getvalue()[len(raw):] == b"\x82\x03\x00\x01\x02"


def test_connection_header_may_list_tokens():
    src, reader, writer, req, out = _prepare(_handshake(connection="keep-alive, Upgrade"))
    upgrade(src, reader, writer, req)
    assert out.getvalue().startswith(b"HTTP/1.1 101")


@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"method": "POST"}, BadRequestMethodError),
        ({"version": "12"}, BadWebSocketVersionError),
        ({"version": None}, BadWebSocketVersionError),
        ({"upgrade_to": "h2c"}, NotWebSocketError),
        ({"upgrade_to": None}, NotWebSocketError),
        ({"connection": "close"}, NotWebSocketError),
        ({"key": None}, ChallengeResponseError),
    ],
)
def test_upgrade_rejects_bad_requests(kwargs, error):
    src, reader, writer, req, out = _prepare(_handshake(**kwargs))
    with pytest.raises(error) as info:
        upgrade(src, reader, writer, req)
    assert isinstance(info.value, UpgradeError)
    writer.flush()
    assert out.getvalue() == b""


def _read_response(client_file):
    lines = []
    while True:
        line = client_file.readline()
        lines.append(line)
        if line in (b"\r\n", b""):
            return b"".join(lines)


def test_server_over_socket():
    data = bytes([0, 1, 2])
    server_sock, client_sock = socket.socketpair()
    server_sock.settimeout(5)
    client_sock.settimeout(5)
    try:
        client_sock.sendall(_handshake())
        rwc = server_sock.makefile("rwb", buffering=0)
        rd = new_reader(rwc)
        wr = new_writer(rwc)
        req = read_request(rd)
        assert req.request_uri == "/sub"
        ws = upgrade(rwc, rd, wr, req)
        ws.write_message(MessageType.BINARY, data)
        ws.flush()

        client_file = client_sock.makefile("rb")
        response = _read_response(client_file)
        assert response.startswith(b"HTTP/1.1 101 Switching Protocols\r\n")
        frame = client_file.read(5)
        assert frame[0] == 0x80 | MessageType.BINARY
        assert frame[1] == len(data)
        assert frame[2:] == data

        mask_key = b"\x11\x22\x33\x44"
        masked = bytes(c ^ mask_key[i % 4] for i, c in enumerate(data))
        client_sock.sendall(bytes([0x82, 0x80 | len(data)]) + mask_key + masked)
        op, payload = ws.read_message()
        assert op == MessageType.BINARY
        assert payload == data
        client_file.close()
        rwc.close()
    finally:
        server_sock.close()
        client_sock.close()