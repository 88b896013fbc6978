# srcon/client.py
from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

from .config import DEFAULT_PORT, parse_address
from .session import Session, SessionState

logger = logging.getLogger(__name__)

Address = Union[str, Tuple[str, int]]


@dataclass(frozen=True)
class ClientOptions:
    password: str = ""
    # seconds allowed for the TCP dial; None blocks. Requests never time out.
    connect_timeout: Optional[float] = None
    next_id: Optional[Callable[[], int]] = None


class RconClient:
    """Authenticated RCON connection. Use connect() to get one."""

    def __init__(self, sock: socket.socket, options: ClientOptions):
        self.session = Session(sock, options.password, next_id=options.next_id)

    @property
    def state(self) -> SessionState:
        return self.session.state

    def authenticate(self) -> None:
        _run("authenticate", self.session.authenticate)

    def execute(self, text: str) -> str:
        return _run("command", self.session.command, text)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RconClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _run(phase: str, fn, *args):
    try:
        return fn(*args)
    except Exception as e:
        e.phase = phase
        logger.debug("RCON %s failed: %s", phase, e)
        raise


def dial(address: Address, timeout: Optional[float] = None) -> socket.socket:
    host, port = parse_address(address, DEFAULT_PORT) if isinstance(address, str) else address
    sock = socket.create_connection((host, port), timeout=timeout)
    sock.settimeout(None)
    logger.info("Connected to RCON %s:%d", host, port)
    return sock


def connect(address: Address, options: Optional[ClientOptions] = None) -> RconClient:
    """Open a TCP connection to address and authenticate with options.password."""
    options = options or ClientOptions()
    sock = dial(address, options.connect_timeout)
    client = RconClient(sock, options)
    try:
        client.authenticate()
    except Exception:
        client.close()
        raise
    return client
