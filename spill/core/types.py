"""
Spill Core Types

Transient values passed between the enumerator, encoder and dispatcher.
Nothing here outlives a single dispatch pass.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Sequence

from spill.constants import MIN_PORT, MAX_PORT
from spill.errors import InvalidPortError, InvalidParameterError


def format_host(host: str) -> str:
    """Bracket IPv6 literals so they can be joined with a port."""
    if ":" in host and not host.startswith("["):
        return f"[{host}]"
    return host


@dataclass(frozen=True, slots=True)
class Destination:
    """
    UDP destination.

    Produced by the enumerator, consumed exactly once by the dispatcher.
    """
    address: str
    port: int

    def __post_init__(self):
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise InvalidPortError(self.port)
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise InvalidPortError(self.port)

    def __str__(self) -> str:
        return f"{format_host(self.address)}:{self.port}"


@dataclass(frozen=True, slots=True)
class CallbackAddress:
    """Where targets are invited to call back: host, port and resource path."""
    host: str
    port: int
    path: str

    def __post_init__(self):
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise InvalidPortError(self.port)
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise InvalidPortError(self.port)
        if not self.path.startswith("/"):
            raise InvalidParameterError("path", "must start with '/'")

    @property
    def url(self) -> str:
        return f"http://{format_host(self.host)}:{self.port}{self.path}"


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """A payload paired with the one destination it is sent to."""
    destination: Destination
    payload: bytes

    def __len__(self) -> int:
        return len(self.payload)


Batch = List[OutboundMessage]


def iter_batches(messages: Sequence[OutboundMessage], batch_size: int) -> Iterator[Batch]:
    """
    Split messages into consecutive batches of at most batch_size.

    Order is preserved; the last batch may be shorter.
    """
    if batch_size < 1:
        raise InvalidParameterError("batch_size", "must be at least 1")

    for start in range(0, len(messages), batch_size):
        yield list(messages[start:start + batch_size])
