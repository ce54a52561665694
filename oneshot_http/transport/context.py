"""Context object shared across worker threads."""

from dataclasses import dataclass
from typing import Optional

from oneshot_http.bootstrap.config import ServerConfig
from oneshot_http.lifecycle.state import ServerLifecycle


@dataclass(frozen=True)
class WorkerContext:
    """Read-only dependencies handed to every connection worker."""

    config: ServerConfig
    lifecycle: Optional[ServerLifecycle] = None
