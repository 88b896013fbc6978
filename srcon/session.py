# srcon/session.py
"""
Authentication handshake and command exchange on one RCON connection.

Strictly one request in flight: every send is followed by a blocking receive
before anything else happens, so a Session must not be shared between threads
without external locking.
"""
from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from .errors import NotAuthenticated, PacketTooLarge, ProtocolError, Unauthorized
from .framing import Framer
from .packet import Packet, RequestType, ResponseType

logger = logging.getLogger(__name__)

MAX_REQUEST_ID = 2**31 - 1


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


def request_counter(start: int = 1) -> Callable[[], int]:
    """Return a generator of positive request ids: start, start+1, ... wrapping to 1."""
    state = {"next": start}

    def next_id() -> int:
        rid = state["next"]
        state["next"] = rid + 1 if rid < MAX_REQUEST_ID else 1
        return rid

    return next_id


class Session:
    def __init__(self, sock, password: str, next_id: Optional[Callable[[], int]] = None):
        self.sock = sock
        self.password = password
        self.framer = Framer(sock)
        self.next_id = next_id or request_counter()
        self.state = SessionState.UNAUTHENTICATED

    def authenticate(self) -> None:
        if self.state is not SessionState.UNAUTHENTICATED:
            raise ProtocolError(f"cannot authenticate a session that is {self.state.value}")
        self.state = SessionState.AUTHENTICATING
        try:
            self._authenticate()
        except BaseException:
            self.state = SessionState.FAILED
            raise
        self.state = SessionState.AUTHENTICATED
        logger.info("RCON session authenticated")

    def _authenticate(self) -> None:
        req = Packet.of(self.next_id(), RequestType.AUTH, self.password)
        self.framer.send(req)

        resp = self.framer.receive()
        if resp.kind != ResponseType.AUTH_RESPONSE:
            # some servers send an empty RESPONSE_VALUE right before the real answer
            logger.debug("skipping packet type %d before auth response", resp.kind)
            resp = self.framer.receive()
            if resp.kind != ResponseType.AUTH_RESPONSE:
                raise ProtocolError(
                    f"expected auth response, got packet type {resp.kind} twice"
                )

        if resp.id == -1:
            raise Unauthorized("RCON authentication failed")
        if resp.id != req.id:
            raise ProtocolError(f"auth response id {resp.id} does not match request id {req.id}")

    def command(self, text: str) -> str:
        """
        Run one command and return its output.

        A single response packet is taken as the whole answer; output that the
        server splits over several packets comes back truncated.
        """
        if self.state is not SessionState.AUTHENTICATED:
            raise NotAuthenticated(f"cannot run commands on a session that is {self.state.value}")
        try:
            req = Packet.of(self.next_id(), RequestType.EXEC_COMMAND, text)
            self.framer.send(req)
            resp = self.framer.receive()
            if resp.kind != ResponseType.RESPONSE_VALUE or resp.id != req.id:
                raise ProtocolError(
                    f"unexpected response id={resp.id} type={resp.kind} to request {req.id}"
                )
        except PacketTooLarge:
            # nothing was written, the connection is still in step
            raise
        except BaseException:
            self.state = SessionState.FAILED
            raise
        return resp.text

    def close(self) -> None:
        self.sock.close()
