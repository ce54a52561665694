"""Main connection acceptance loop."""

import logging
import socket
import threading

from oneshot_http.bootstrap.config import ServerConfig
from oneshot_http.bootstrap.socket_factory import create_server_socket
from oneshot_http.domain.connection_id import get_logger
from oneshot_http.lifecycle.state import ServerLifecycle
from oneshot_http.transport.context import WorkerContext
from oneshot_http.transport.worker import handle_client

ACCEPT_LOGGER = get_logger("transport.accept")


def spawn_worker(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> threading.Thread:
    """Start a dedicated thread for a newly accepted connection."""
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "connection_accepted",
                "client": f"{client_address[0]}:{client_address[1]}",
            },
        )
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, context),
        daemon=False,
    )
    # Tracked before start so a concurrent shutdown cannot miss it.
    if context.lifecycle is not None:
        context.lifecycle.register_worker(thread)
    thread.start()
    return thread


def serve_forever(
    server_socket: socket.socket, context: WorkerContext, lifecycle: ServerLifecycle
) -> None:
    """Accept connections until the lifecycle asks to stop."""
    while not lifecycle.should_stop():
        try:
            client_socket, client_address = server_socket.accept()
        except socket.timeout:
            continue
        except OSError as error:
            if lifecycle.should_stop():
                break
            ACCEPT_LOGGER.error(
                "Socket accept failed",
                extra={"event": "accept_error", "error_type": type(error).__name__},
            )
            continue
        spawn_worker(client_socket, client_address, context)


def run_server(config: ServerConfig, lifecycle: ServerLifecycle) -> None:
    """Create the listening socket and serve until shutdown is requested."""
    server_socket = create_server_socket(config)
    context = WorkerContext(config=config, lifecycle=lifecycle)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={"event": "server_listening", "host": config.host, "port": config.port},
    )

    try:
        serve_forever(server_socket, context, lifecycle)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "active_workers": lifecycle.active_worker_count(),
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
