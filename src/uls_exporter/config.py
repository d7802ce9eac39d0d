"""
Exporter settings. Each knob comes from a CLI flag, then an
environment variable, then the default below (see main.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

DEFAULT_LISTEN = ":9101"
DEFAULT_PATH = "/metrics"
DEFAULT_URI = "http://localhost:8080"

ENV_LISTEN = "ULS_LISTEN"
ENV_PATH = "ULS_PATH"
ENV_URI = "ULS_URI"


@dataclass(frozen=True)
class ExporterConfig:
    listen: str = DEFAULT_LISTEN
    path: str = DEFAULT_PATH
    uri: str = DEFAULT_URI

    def __post_init__(self):
        if not self.path.startswith("/"):
            raise ValueError(f"metrics path must start with '/', got {self.path!r}")


def parse_listen_address(listen: str) -> Tuple[str, int]:
    """Split "host:port" into (host, port). An empty host binds every interface.

    >>> parse_listen_address(":9101")
    ('0.0.0.0', 9101)
    >>> parse_listen_address("[::1]:9101")
    ('::1', 9101)
    """
    host, sep, port_str = listen.rpartition(":")
    if not sep:
        raise ValueError(f"listen address {listen!r} is missing a port")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 listen address {listen!r} must be bracketed")

    if not port_str.isdigit():
        raise ValueError(f"listen address {listen!r} has a non-numeric port")
    port = int(port_str)
    if port > 65535:
        raise ValueError(f"listen port {port} out of range")

    return host or "0.0.0.0", port
