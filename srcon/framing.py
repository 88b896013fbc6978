# srcon/framing.py
"""Length-prefixed framing of RCON packets over a stream socket."""
from __future__ import annotations

import logging
import struct

from .errors import ConnectionClosed, MalformedPacket, PacketTooLarge
from .packet import MAX_PACKET_SIZE, Packet, decode, encode

logger = logging.getLogger(__name__)

_SIZE = struct.Struct("<i")


def recv_exact(sock, n: int) -> bytes:
    """Read exactly n bytes, raising ConnectionClosed if the peer goes away first."""
    data = b""
    while len(data) < n:
        chunk = sock.recv(n - len(data))
        if not chunk:
            raise ConnectionClosed(
                f"RCON connection closed after {len(data)} of {n} bytes"
            )
        data += chunk
    return data


class Framer:
    """
    Sends and receives one packet per call on a blocking socket.

    Only needs sendall() and recv() from the socket, so a socketpair end
    works as well as a TCP connection.
    """

    def __init__(self, sock):
        self.sock = sock

    def send(self, packet: Packet) -> None:
        data = encode(packet)
        size = len(data)
        if size > MAX_PACKET_SIZE:
            raise PacketTooLarge(size, MAX_PACKET_SIZE)
        logger.debug("-> id=%d type=%d size=%d", packet.id, packet.kind, size)
        self.sock.sendall(_SIZE.pack(size) + data)

    def receive(self) -> Packet:
        (size,) = _SIZE.unpack(recv_exact(self.sock, _SIZE.size))
        if size < 0 or size > MAX_PACKET_SIZE:
            raise MalformedPacket(f"RCON packet size {size} outside 0..{MAX_PACKET_SIZE}")
        packet = decode(recv_exact(self.sock, size))
        logger.debug("<- id=%d type=%d size=%d", packet.id, packet.kind, size)
        return packet
