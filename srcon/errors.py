# srcon/errors.py
from __future__ import annotations


class RconError(Exception):
    """Base class for everything the RCON client raises on its own."""


class MalformedPacket(RconError, ValueError):
    pass


class PacketTooLarge(RconError, ValueError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"packet too large: {size} bytes, maximum {limit}")
        self.size = size
        self.limit = limit


class ConnectionClosed(RconError, ConnectionError):
    pass


class ProtocolError(RconError):
    pass


class NotAuthenticated(ProtocolError):
    pass


class Unauthorized(RconError, PermissionError):
    pass
