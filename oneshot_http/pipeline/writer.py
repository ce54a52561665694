"""Response serialization and transmission."""

import gzip
import socket

from oneshot_http.domain.connection_id import get_logger
from oneshot_http.domain.errors import ConnectionWriteError
from oneshot_http.domain.http_types import OutgoingResponse

WRITER_LOGGER = get_logger("pipeline.writer")
COMPRESSION_LOGGER = get_logger("compression")

PROTOCOL = "HTTP/1.1"


def compress_body(payload: bytes) -> bytes:
    """Gzip a response body."""
    compressed = gzip.compress(payload)
    COMPRESSION_LOGGER.debug(
        "Compressed payload",
        extra={
            "event": "payload_compressed",
            "bytes_in": len(payload),
            "bytes_out": len(compressed),
        },
    )
    return compressed


def serialize_response(response: OutgoingResponse, compress: bool = False) -> bytes:
    """Lay out status line, headers and body as HTTP/1.1 bytes.

    Content-Type appears only when a type is set, and Content-Length only
    alongside it. Compression applies to non-empty bodies and Content-Length
    then counts the compressed bytes.
    """
    body = response.body
    header_lines = [f"{PROTOCOL} {response.status}"]
    if response.content_type:
        header_lines.append(f"Content-Type: {response.content_type}")
    if compress and body:
        body = compress_body(body)
        header_lines.append("Content-Encoding: gzip")
    if response.content_type:
        header_lines.append(f"Content-Length: {len(body)}")
    header_block = "".join(f"{line}\r\n" for line in header_lines) + "\r\n"
    return header_block.encode("iso-8859-1") + body


def send_response(
    client_socket: socket.socket, response: OutgoingResponse, compress: bool = False
) -> int:
    """Write one response to the socket and return the number of bytes sent."""
    payload = serialize_response(response, compress)
    try:
        client_socket.sendall(payload)
    except OSError as exc:
        raise ConnectionWriteError(f"response write failed: {exc}") from exc
    WRITER_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status": response.status,
            "bytes_out": len(payload),
            "compressed": compress and bool(response.body),
        },
    )
    return len(payload)
