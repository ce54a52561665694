"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value is not None else default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


DEFAULT_DIRECTORY = _env_str("ONESHOT_HTTP_DIRECTORY", "")
DEFAULT_HOST = _env_str("ONESHOT_HTTP_HOST", "0.0.0.0")
DEFAULT_PORT = _env_int("ONESHOT_HTTP_PORT", 4221)
DEFAULT_SOCKET_TIMEOUT = _env_float("ONESHOT_HTTP_SOCKET_TIMEOUT", 30.0)
DEFAULT_BODY_TIMEOUT = _env_float("ONESHOT_HTTP_BODY_TIMEOUT", 10.0)
DEFAULT_READ_SIZE = _env_int("ONESHOT_HTTP_READ_SIZE", 1024)
DEFAULT_MAX_HEAD_BYTES = _env_int("ONESHOT_HTTP_MAX_HEAD_BYTES", 64 * 1024)
DEFAULT_MAX_BODY_BYTES = _env_int("ONESHOT_HTTP_MAX_BODY_BYTES", 5 * 1024 * 1024)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("ONESHOT_HTTP_SHUTDOWN_GRACE_SECONDS", 10)

HEADER_DELIMITER = b"\r\n\r\n"
CRLF = "\r\n"
FILES_ENDPOINT_PREFIX = "/files/"
ECHO_ENDPOINT_PREFIX = "/echo/"
# Methods whose Content-Length must be valid; other methods ignore a bad one.
BODY_METHODS = frozenset({"POST"})


@dataclass(frozen=True)
class ServerConfig:
    """Immutable settings shared read-only by the acceptor and every worker."""

    directory: str = DEFAULT_DIRECTORY
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    socket_timeout: float = DEFAULT_SOCKET_TIMEOUT
    body_timeout: float = DEFAULT_BODY_TIMEOUT
    read_size: int = DEFAULT_READ_SIZE
    max_head_bytes: int = DEFAULT_MAX_HEAD_BYTES
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="One-shot HTTP/1.1 server")
    parser.add_argument(
        "--directory",
        default=DEFAULT_DIRECTORY,
        help="Base directory for /files/ routes (empty disables them)",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    default_log_level = os.getenv("ONESHOT_HTTP_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("ONESHOT_HTTP_LOG_DESTINATION", "stdout")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default="json",
        choices=["json", "text"],
        help="Structured JSON lines or plain text",
    )
    parser.add_argument(
        "--socket-timeout",
        type=float,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Seconds a single socket read or write may block",
    )
    parser.add_argument(
        "--body-timeout",
        type=float,
        default=DEFAULT_BODY_TIMEOUT,
        help="Overall deadline in seconds for completing a partially received body",
    )
    parser.add_argument(
        "--read-size",
        type=int,
        default=DEFAULT_READ_SIZE,
        help="Bytes requested by each head read",
    )
    parser.add_argument(
        "--max-head-bytes",
        type=int,
        default=DEFAULT_MAX_HEAD_BYTES,
        help="Largest request head accepted before answering 431",
    )
    parser.add_argument(
        "--max-body-bytes",
        type=int,
        default=DEFAULT_MAX_BODY_BYTES,
        help="Largest declared Content-Length accepted before answering 413",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for in-flight connections on shutdown",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Freeze parsed CLI arguments into a ServerConfig."""
    return ServerConfig(
        directory=args.directory,
        host=args.host,
        port=args.port,
        socket_timeout=args.socket_timeout,
        body_timeout=args.body_timeout,
        read_size=max(1, args.read_size),
        max_head_bytes=max(1, args.max_head_bytes),
        max_body_bytes=max(0, args.max_body_bytes),
        shutdown_grace_seconds=max(0, args.shutdown_grace_seconds),
    )
