"""Shared fixtures: raw packet helpers and an in-process mock RCON server."""

import socket
import struct
import threading

import pytest

AUTH = 3
AUTH_RESPONSE = 2
EXEC_COMMAND = 2
RESPONSE_VALUE = 0


def frame(req_id, kind, body=b""):
    if isinstance(body, str):
        body = body.encode()
    data = struct.pack("<ii", req_id, kind) + body + b"\x00\x00"
    return struct.pack("<i", len(data)) + data


def send_packet(conn, req_id, kind, body=b""):
    conn.sendall(frame(req_id, kind, body))


def _recv_exact(conn, n):
    data = b""
    while len(data) < n:
        chunk = conn.recv(n - len(data))
        if not chunk:
            raise ConnectionError("client went away")
        data += chunk
    return data


def read_packet(conn):
    """Read one framed packet; returns (id, type, body without terminators)."""
    (size,) = struct.unpack("<i", _recv_exact(conn, 4))
    data = _recv_exact(conn, size)
    req_id, kind = struct.unpack("<ii", data[:8])
    assert data[-2:] == b"\x00\x00"
    return req_id, kind, data[8:-2]


class MockRconServer:
    """Accepts one connection and hands it to handler(conn) on a thread."""

    def __init__(self, handler):
        self.handler = handler
        self.error = None
        self._srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._srv.bind(("127.0.0.1", 0))
        self._srv.listen(1)
        self._srv.settimeout(5.0)
        host, port = self._srv.getsockname()
        self.address = f"{host}:{port}"
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self):
        self._thread.start()
        return self

    def _serve(self):
        try:
            conn, _ = self._srv.accept()
        except OSError:
            return
        conn.settimeout(5.0)
        try:
            self.handler(conn)
        except (ConnectionError, socket.timeout):
            pass
        except Exception as e:
            self.error = e
        finally:
            conn.close()

    def stop(self):
        self._srv.close()
        self._thread.join(timeout=5)


def game_server(password="test123456", replies=None, spurious=False, seen=None):
    """Handler that behaves like a well-formed game server."""
    replies = replies or {"/version": "0.17.79\n"}

    def handle(conn):
        req_id, kind, body = read_packet(conn)
        if seen is not None:
            seen.append((req_id, kind, body))
        assert kind == AUTH
        if spurious:
            send_packet(conn, req_id, RESPONSE_VALUE, b"")
        ok = body.decode() == password
        send_packet(conn, req_id if ok else -1, AUTH_RESPONSE)
        while True:
            req_id, kind, body = read_packet(conn)
            if seen is not None:
                seen.append((req_id, kind, body))
            send_packet(conn, req_id, RESPONSE_VALUE, replies.get(body.decode(), ""))

    return handle


@pytest.fixture
def rcon_server():
    """Factory: rcon_server(handler) -> started MockRconServer."""
    servers = []

    def start(handler):
        srv = MockRconServer(handler).start()
        servers.append(srv)
        return srv

    yield start
    for srv in servers:
        srv.stop()
        if srv.error is not None:
            raise srv.error


@pytest.fixture
def sock_pair():
    """(client_end, server_end) of a connected socketpair."""
    a, b = socket.socketpair()
    a.settimeout(5.0)
    b.settimeout(5.0)
    yield a, b
    a.close()
    b.close()
