"""Check that the server port is free before touching the filesystem."""

from __future__ import annotations

import socket

from embedded_postgres.ports.inbound import PortUnavailableError


def ensure_port_available(port: int, host: str = "localhost") -> None:
    """Bind and immediately release a TCP listener on ``host:port``.

    Raises:
        PortUnavailableError: If the port cannot be bound.
    """
    try:
        with socket.create_server((host, port)):
            pass
    except OSError as e:
        raise PortUnavailableError(port) from e
