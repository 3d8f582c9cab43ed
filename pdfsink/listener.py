"""
listener.py

Plain blocking TCP server. Connections are handled one after another, so only
one document is ever being received at a time.
"""

import logging
import socket
from typing import Optional

from .errors import ListenerError
from .handler import CHUNK, handle_connection

logger = logging.getLogger(__name__)

BACKLOG = 10


def open_listener(port: int, backlog: int = BACKLOG) -> socket.socket:
    """Bind the first usable wildcard address (IPv4 or IPv6) for `port` and listen on it."""
    try:
        infos = socket.getaddrinfo(None, port, socket.AF_UNSPEC, socket.SOCK_STREAM, 0, socket.AI_PASSIVE)
    except socket.gaierror as e:
        raise ListenerError(port, f"getaddrinfo() failed: {e}") from e

    last_error: Optional[OSError] = None
    for family, socktype, proto, _, addr in infos:
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as e:
            last_error = e
            continue
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(addr)
            sock.listen(backlog)
        except OSError as e:
            # try the next address, if any
            sock.close()
            last_error = e
            continue
        logger.info("Listening on %s", sock.getsockname()[:2])
        return sock

    raise ListenerError(port, f"Failed to create socket on port {port}: {last_error}")


def serve(
    listener: socket.socket,
    directory: str,
    *,
    chunk_size: int = CHUNK,
    notifier=None,
    max_connections: Optional[int] = None,
) -> int:
    """
    Accept and handle connections until `max_connections` were handled
    (forever when None). Returns the number of handled connections.
    """
    handled = 0
    while max_connections is None or handled < max_connections:
        try:
            conn, addr = listener.accept()
        except OSError as e:
            if listener.fileno() == -1:
                # listening socket closed under us, nothing left to accept
                break
            logger.error("Failed to accept connection: %s", e)
            continue

        with conn:
            logger.info("Connected: %s", addr[:2] if isinstance(addr, tuple) else addr)
            handle_connection(conn, directory, chunk_size=chunk_size, notifier=notifier)
        handled += 1
    return handled
