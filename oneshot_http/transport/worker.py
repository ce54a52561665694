"""Worker thread logic: one request and one response per connection."""

import socket
import threading
from typing import Optional

from oneshot_http.domain.connection_id import (
    clear_connection_id,
    generate_connection_id,
    get_logger,
    set_connection_id,
)
from oneshot_http.domain.errors import (
    ConnectionReadError,
    ConnectionWriteError,
    InvalidContentLength,
    MalformedRequestLine,
    RequestEntityTooLarge,
    RequestHeadTooLarge,
)
from oneshot_http.domain.http_types import OutgoingResponse, RawRequest
from oneshot_http.domain.response_builders import (
    accepts_gzip,
    bad_request_response,
    entity_too_large_response,
    head_too_large_response,
)
from oneshot_http.pipeline.reader import read_request
from oneshot_http.pipeline.router import route_request
from oneshot_http.pipeline.writer import send_response
from oneshot_http.transport.context import WorkerContext

WORKER_LOGGER = get_logger("transport.worker")


def _send_error_response(
    client_socket: socket.socket, response: OutgoingResponse, client: str
) -> None:
    """Best-effort status for a request that failed after the head arrived."""
    try:
        send_response(client_socket, response)
    except ConnectionWriteError as error:
        WORKER_LOGGER.warning(
            "Could not deliver error response",
            extra={
                "event": "error_response_failed",
                "client": client,
                "status": response.status,
                "error": str(error),
            },
        )


def serve_request(
    client_socket: socket.socket, context: WorkerContext, client: str
) -> Optional[RawRequest]:
    """Read, route and answer a single request.

    Framing failures that still allow an answer get a best-effort status; the
    rest propagate to handle_client, which logs them and drops the connection.
    """
    try:
        request = read_request(client_socket, context.config)
    except InvalidContentLength as error:
        WORKER_LOGGER.warning(
            "Invalid Content-Length",
            extra={"event": "invalid_content_length", "client": client, "error": str(error)},
        )
        _send_error_response(client_socket, bad_request_response(), client)
        return None
    except RequestEntityTooLarge as error:
        WORKER_LOGGER.warning(
            "Request body size exceeded limit",
            extra={"event": "body_size_exceeded", "client": client, "error": str(error)},
        )
        _send_error_response(client_socket, entity_too_large_response(), client)
        return None
    except RequestHeadTooLarge as error:
        WORKER_LOGGER.warning(
            "Request head size exceeded limit",
            extra={"event": "head_size_exceeded", "client": client, "error": str(error)},
        )
        _send_error_response(client_socket, head_too_large_response(), client)
        return None

    if request is None:
        WORKER_LOGGER.debug(
            "Client disconnected before sending a request",
            extra={"event": "client_disconnected", "client": client},
        )
        return None

    response = route_request(request, context.config.directory)
    send_response(client_socket, response, accepts_gzip(request.headers))
    WORKER_LOGGER.info(
        "Request served",
        extra={
            "event": "request_complete",
            "client": client,
            "method": request.method,
            "route": request.path,
            "status": response.status_code,
        },
    )
    return request


def _close_socket(client_socket: socket.socket, client: str) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        # Peer already gone.
        pass
    client_socket.close()
    WORKER_LOGGER.debug(
        "Socket closed", extra={"event": "socket_closed", "client": client}
    )


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve one exchange on the connection, then close it.

    Every failure is logged here so nothing escapes the worker thread.
    """
    client = f"{client_address[0]}:{client_address[1]}"
    current_thread = threading.current_thread()
    lifecycle = context.lifecycle
    set_connection_id(generate_connection_id())

    try:
        client_socket.settimeout(context.config.socket_timeout)
        serve_request(client_socket, context, client)
    except MalformedRequestLine as error:
        WORKER_LOGGER.warning(
            "Malformed request line, closing without a response",
            extra={"event": "malformed_request", "client": client, "error": str(error)},
        )
    except (ConnectionReadError, ConnectionWriteError) as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _close_socket(client_socket, client)
        if lifecycle is not None:
            lifecycle.cleanup_worker(current_thread)
        clear_connection_id()
