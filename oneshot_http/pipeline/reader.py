"""Request reading and parsing.

A request is read in two phases. Head reads grow a buffer until the blank line
that ends the headers shows up; whatever follows it in that buffer is the
provisional body. When ``Content-Length`` promises more than the provisional
body holds, a single body-completion read collects exactly the missing bytes
under a deadline so a client that never sends them cannot pin the worker.
"""

import logging
import socket
import time
from typing import Iterable, Optional, Tuple

from oneshot_http.bootstrap.config import (
    BODY_METHODS,
    CRLF,
    HEADER_DELIMITER,
    ServerConfig,
)
from oneshot_http.domain.connection_id import get_logger
from oneshot_http.domain.errors import (
    ConnectionReadError,
    InvalidContentLength,
    MalformedRequestLine,
    RequestEntityTooLarge,
    RequestHeadTooLarge,
)
from oneshot_http.domain.http_types import HeaderMap, RawRequest

READER_LOGGER = get_logger("pipeline.reader")

HEAD_ENCODING = "iso-8859-1"


def _recv_with_deadline(
    client_socket: socket.socket, deadline_ns: int, max_bytes: int
) -> bytes:
    """Receive up to max_bytes, raising TimeoutError once the deadline has passed."""
    remaining_ns = deadline_ns - time.monotonic_ns()
    if remaining_ns <= 0:
        raise TimeoutError("Request deadline exceeded")
    client_socket.settimeout(remaining_ns / 1_000_000_000)
    return client_socket.recv(max_bytes)


def read_head(
    client_socket: socket.socket, read_size: int, max_head_bytes: int
) -> Optional[Tuple[bytes, bytes]]:
    """Read until the head terminator and return (head, provisional_body).

    Returns None when the peer closes the connection before the head is complete.
    """
    buffer = b""
    while HEADER_DELIMITER not in buffer:
        if len(buffer) > max_head_bytes:
            raise RequestHeadTooLarge(
                f"head exceeded {max_head_bytes} bytes without a blank line"
            )
        try:
            chunk = client_socket.recv(read_size)
        except OSError as exc:
            raise ConnectionReadError(f"head read failed: {exc}") from exc
        if not chunk:
            return None
        buffer += chunk

    head, provisional_body = buffer.split(HEADER_DELIMITER, 1)
    if len(head) > max_head_bytes:
        raise RequestHeadTooLarge(f"head exceeded {max_head_bytes} bytes")
    return head, provisional_body


def parse_request_line(request_line: str) -> Tuple[str, str, str]:
    """Split the request line into method, path and an optional version."""
    tokens = request_line.split(" ")
    if len(tokens) < 2 or not tokens[0]:
        raise MalformedRequestLine(f"Invalid request line: {request_line!r}")
    version = tokens[2] if len(tokens) > 2 else ""
    return tokens[0], tokens[1], version


def parse_headers(lines: Iterable[str]) -> HeaderMap:
    """Convert raw header lines into a lowercase-keyed HeaderMap.

    Lines without ``": "`` are skipped; a repeated name keeps the last value.
    """
    parsed = HeaderMap()
    for line in lines:
        if not line:
            break
        if ": " in line:
            name, value = line.split(": ", 1)
            parsed[name] = value
    return parsed


def determine_content_length(
    method: str, headers: HeaderMap, max_body_bytes: int
) -> Optional[int]:
    """Validate and return the declared Content-Length, or None when absent.

    A malformed value is an error only for methods that carry a body; for the
    rest it is ignored and no body is read.
    """
    if "content-length" not in headers:
        return None
    raw_value = headers["content-length"].strip()
    if not raw_value.isdecimal():
        if method in BODY_METHODS:
            raise InvalidContentLength(f"Invalid Content-Length: {raw_value!r}")
        READER_LOGGER.debug(
            "Ignoring invalid Content-Length",
            extra={"event": "content_length_ignored", "method": method},
        )
        return None
    content_length = int(raw_value)
    if content_length > max_body_bytes:
        raise RequestEntityTooLarge(
            f"Content-Length {content_length} exceeds {max_body_bytes}"
        )
    return content_length


def read_body_remainder(
    client_socket: socket.socket, remaining: int, timeout: float
) -> bytes:
    """Body-completion read: collect exactly ``remaining`` more bytes.

    The whole read shares one deadline. Running out of time, a socket error or
    the peer closing early all raise ConnectionReadError.
    """
    deadline_ns = time.monotonic_ns() + int(timeout * 1_000_000_000)
    received = bytearray()
    try:
        while len(received) < remaining:
            chunk = _recv_with_deadline(
                client_socket, deadline_ns, remaining - len(received)
            )
            if not chunk:
                raise ConnectionReadError(
                    f"connection closed with {remaining - len(received)} body bytes outstanding"
                )
            received += chunk
    except OSError as exc:
        raise ConnectionReadError(
            f"body completion read failed after {len(received)} of {remaining} bytes"
        ) from exc
    return bytes(received)


def read_request(
    client_socket: socket.socket, config: ServerConfig
) -> Optional[RawRequest]:
    """Read and parse one request from the socket.

    Returns None when the client disconnects before sending a complete head.
    """
    head_and_body = read_head(client_socket, config.read_size, config.max_head_bytes)
    if head_and_body is None:
        return None
    head, body = head_and_body

    lines = head.decode(HEAD_ENCODING).split(CRLF)
    method, path, version = parse_request_line(lines[0])
    headers = parse_headers(lines[1:])
    content_length = determine_content_length(method, headers, config.max_body_bytes)

    if content_length is None:
        body = b""
    elif len(body) < content_length:
        remaining = content_length - len(body)
        READER_LOGGER.debug(
            "Completing partially received body",
            extra={
                "event": "body_completion_read",
                "content_length": content_length,
                "remaining": remaining,
            },
        )
        body += read_body_remainder(client_socket, remaining, config.body_timeout)
        client_socket.settimeout(config.socket_timeout)
    else:
        body = body[:content_length]

    if READER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        READER_LOGGER.debug(
            "Request parsed",
            extra={
                "event": "request_parsed",
                "method": method,
                "route": path,
                "bytes_in": len(head) + len(HEADER_DELIMITER) + len(body),
            },
        )
    return RawRequest(method, path, headers, body, version, content_length)
