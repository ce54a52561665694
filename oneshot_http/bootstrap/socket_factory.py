"""Listening socket creation."""

import socket

from oneshot_http.bootstrap.config import ServerConfig
from oneshot_http.domain.connection_id import get_logger

SOCKET_LOGGER = get_logger("socket")

# accept() wakes this often to notice a shutdown request.
ACCEPT_POLL_SECONDS = 0.5


def create_server_socket(config: ServerConfig) -> socket.socket:
    """Bind and listen on the configured address."""
    server_socket = socket.create_server(
        (config.host, config.port),
        reuse_port=hasattr(socket, "SO_REUSEPORT"),
    )
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    SOCKET_LOGGER.debug(
        "Listening socket created",
        extra={"event": "socket_bound", "host": config.host, "port": config.port},
    )
    return server_socket
