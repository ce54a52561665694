"""Logging configuration utilities for the HTTP server."""

import json
import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from oneshot_http.domain.connection_id import LOGGER_ROOT, ConnectionLoggerAdapter

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(connection_id)s] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROTATE_AT_BYTES = 10 * 1024 * 1024
ROTATED_FILES_KEPT = 5
REDACTED = "[REDACTED]"

# Credential keywords, or a hex run long enough to be a key or digest.
CREDENTIAL_PATTERN = re.compile(
    r"(?i)authorization|token|password|secret|api[_-]?key|\b[a-f0-9]{32,}\b"
)

# Extras copied into JSON lines; anything else passed via ``extra`` is dropped.
EXTRA_KEYS = frozenset(
    {
        "active_workers",
        "body_timeout",
        "bytes_in",
        "bytes_out",
        "client",
        "compressed",
        "content_length",
        "destination",
        "directory",
        "error",
        "error_type",
        "host",
        "method",
        "path",
        "port",
        "remaining",
        "remaining_workers",
        "route",
        "shutdown_grace_seconds",
        "signal",
        "socket_timeout",
        "status",
        "use_json",
    }
)


def redact_sensitive(value: str) -> str:
    """Mask a log value outright when any part of it looks like a credential."""
    if value and CREDENTIAL_PATTERN.search(value):
        return REDACTED
    return value


class ConnectionIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Give records logged outside a ConnectionLoggerAdapter the same fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.__dict__.setdefault("connection_id", "-")
        record.__dict__.setdefault("component", record.name)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line, keys sorted."""

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            key: _scrub(value)
            for key, value in vars(record).items()
            if key in EXTRA_KEYS
        }
        fields.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            connection_id=getattr(record, "connection_id", "-"),
            component=getattr(record, "component", "unknown"),
            message=record.getMessage(),
        )
        if hasattr(record, "event"):
            fields["event"] = record.event
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)
        return json.dumps(fields, sort_keys=True, default=str)


def _scrub(value: Any) -> Any:
    return redact_sensitive(value) if isinstance(value, str) else value


def _resolve_level(level_name: str) -> int:
    # getLevelName maps known names to numbers and anything else to a string.
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO


def _build_handler(
    destination: Optional[str], level: int, use_json: bool = True
) -> logging.Handler:
    """Write to stdout, or to a size-rotated file when given a path."""
    handler: logging.Handler
    if not destination or destination.lower() == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        log_path = Path(destination)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path, maxBytes=ROTATE_AT_BYTES, backupCount=ROTATED_FILES_KEPT
        )
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter(datefmt=DATE_FORMAT)
        if use_json
        else logging.Formatter(TEXT_FORMAT, DATE_FORMAT)
    )
    handler.addFilter(ConnectionIdFilter())
    return handler


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, use_json: bool = True
) -> ConnectionLoggerAdapter:
    """Install a single handler on the ``oneshot_http`` logger and return its adapter.

    Handlers left by an earlier call are closed first, so reconfiguring never
    duplicates output.
    """
    root = logging.getLogger(LOGGER_ROOT)
    numeric_level = _resolve_level(level)
    root.setLevel(numeric_level)
    root.propagate = False
    while root.handlers:
        stale = root.handlers[0]
        root.removeHandler(stale)
        stale.close()
    root.addHandler(_build_handler(destination, numeric_level, use_json))

    adapter = ConnectionLoggerAdapter(root, {})
    adapter.info(
        "Logging configured",
        extra={
            "event": "logging_configured",
            "destination": destination or "stdout",
            "use_json": use_json,
        },
    )
    return adapter
