"""Per-connection identifiers carried through logging via contextvars."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

LOGGER_ROOT = "oneshot_http"

_connection_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)


def generate_connection_id() -> str:
    """Return a short random identifier for one accepted connection."""
    return uuid.uuid4().hex[:12]


def get_connection_id() -> Optional[str]:
    """Retrieve the connection id bound to the current worker."""
    return _connection_id_var.get()


def set_connection_id(connection_id: str) -> None:
    """Bind a connection id to the current worker."""
    _connection_id_var.set(connection_id)


def clear_connection_id() -> None:
    """Unbind the connection id from the current worker."""
    _connection_id_var.set(None)


def component_name(logger_name: str) -> str:
    """Strip the package prefix from a logger name."""
    prefix = f"{LOGGER_ROOT}."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix) :]
    return logger_name


class ConnectionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps records with the connection id and component."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        """Add connection_id and component to the extra dict."""
        extra = dict(kwargs.get("extra") or {})
        connection_id = get_connection_id()
        extra["connection_id"] = connection_id if connection_id is not None else "-"
        extra["component"] = component_name(self.logger.name)
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ConnectionLoggerAdapter:
    """Return an adapter around ``oneshot_http.<name>``."""
    return ConnectionLoggerAdapter(logging.getLogger(f"{LOGGER_ROOT}.{name}"), {})
