"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Tuple, Union


class HeaderMap(dict):
    """Header mapping with lowercase keys and case-insensitive lookups.

    Absent keys read back as ``MISSING`` instead of raising ``KeyError``.
    """

    MISSING = ""

    def __init__(
        self, items: Union[Mapping[str, str], Iterable[Tuple[str, str]]] = ()
    ) -> None:
        super().__init__()
        self.update(items)

    def __setitem__(self, key: str, value: str) -> None:
        super().__setitem__(key.lower(), value)

    def __missing__(self, key: str) -> str:
        return self.MISSING

    def __getitem__(self, key: str) -> str:
        return super().__getitem__(key.lower())

    def __delitem__(self, key: str) -> None:
        super().__delitem__(key.lower())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and super().__contains__(key.lower())

    def get(self, key: str, default: Optional[str] = MISSING) -> Optional[str]:
        return super().get(key.lower(), default)

    def update(  # type: ignore[override]
        self,
        items: Union[Mapping[str, str], Iterable[Tuple[str, str]]] = (),
        **kwargs: str,
    ) -> None:
        pairs = items.items() if isinstance(items, Mapping) else items
        for name, value in pairs:
            self[name] = value
        for name, value in kwargs.items():
            self[name] = value

    def setdefault(self, key: str, default: str = MISSING) -> str:  # type: ignore[override]
        return super().setdefault(key.lower(), default)

    def pop(self, key: str, *default: str) -> str:  # type: ignore[override]
        return super().pop(key.lower(), *default)

    def copy(self) -> "HeaderMap":
        return HeaderMap(self)


@dataclass
class RawRequest:
    """Represents a parsed HTTP request."""

    method: str
    path: str
    headers: HeaderMap = field(default_factory=HeaderMap)
    body: bytes = b""
    version: str = ""
    content_length: Optional[int] = None


@dataclass
class OutgoingResponse:
    """Status, optional content type and body handed to the response writer."""

    status: str
    content_type: Optional[str] = None
    body: bytes = b""

    @property
    def status_code(self) -> int:
        """Return the numeric part of the status."""
        return int(self.status.split(" ", 1)[0])
