# srcon/config.py
from __future__ import annotations

import os
from typing import Mapping, Optional, Tuple

DEFAULT_PORT = 27015
DEFAULT_ADDRESS = f"localhost:{DEFAULT_PORT}"


def parse_address(text: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Split 'host', 'host:port' or '[v6addr]:port' into (host, port)."""
    text = text.strip()
    if text.startswith("["):
        host, sep, rest = text[1:].partition("]")
        if not sep:
            raise ValueError(f"unterminated IPv6 address: {text!r}")
        port = rest[1:] if rest.startswith(":") else ""
    elif text.count(":") == 1:
        host, port = text.split(":", 1)
    else:
        host, port = text, ""
    if not host:
        raise ValueError(f"missing host in address {text!r}")
    if not port:
        return host, default_port
    try:
        p = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {text!r}") from None
    if not 0 < p < 65536:
        raise ValueError(f"port out of range in address {text!r}")
    return host, p


def load_options(env: Optional[Mapping[str, str]] = None):
    """Read RCON_ADDRESS / RCON_PASSWORD / RCON_TIMEOUT; returns (address, ClientOptions)."""
    from .client import ClientOptions

    env = os.environ if env is None else env
    address = env.get("RCON_ADDRESS", DEFAULT_ADDRESS)
    timeout = env.get("RCON_TIMEOUT", "").strip()
    options = ClientOptions(
        password=env.get("RCON_PASSWORD", ""),
        connect_timeout=float(timeout) if timeout else None,
    )
    return address, options
