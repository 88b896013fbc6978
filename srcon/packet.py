# srcon/packet.py
"""
Source RCON packet codec.

Wire layout of one packet (the 4-byte length prefix is added by framing.py):

    <i32 id><i32 type><body bytes>\\x00\\x00

Type codes overlap (2 is both AUTH_RESPONSE and EXEC_COMMAND), so requests
and responses get their own enums and the caller decides which one applies.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from .errors import MalformedPacket

MAX_PACKET_SIZE = 4096
MIN_PACKET_SIZE = 10  # id + type + two terminators
TERMINATOR = b"\x00\x00"

_HEADER = struct.Struct("<ii")


class RequestType(IntEnum):
    AUTH = 3
    EXEC_COMMAND = 2


class ResponseType(IntEnum):
    RESPONSE_VALUE = 0
    AUTH_RESPONSE = 2


@dataclass(frozen=True)
class Packet:
    id: int
    kind: int
    body: bytes = b""

    @classmethod
    def of(cls, id: int, kind: int, body: Union[str, bytes] = b"") -> "Packet":
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(id, int(kind), body)

    @property
    def text(self) -> str:
        """Body as text, without the trailing protocol terminators. Bytes that are
        not UTF-8 become U+FFFD; use body for the raw bytes."""
        body = self.body
        if body.endswith(TERMINATOR):
            body = body[: -len(TERMINATOR)]
        return body.decode("utf-8", "replace")


def encode(packet: Packet) -> bytes:
    return _HEADER.pack(packet.id, packet.kind) + packet.body + TERMINATOR


def decode(data: bytes) -> Packet:
    # body is kept verbatim, terminators included; see Packet.text
    if len(data) < MIN_PACKET_SIZE:
        raise MalformedPacket(
            f"RCON packet needs at least {MIN_PACKET_SIZE} bytes, got {len(data)}"
        )
    req_id, kind = _HEADER.unpack_from(data, 0)
    return Packet(req_id, kind, bytes(data[_HEADER.size:]))
