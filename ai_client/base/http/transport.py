"""Transport boundary between the client core and the network.

The core builds :class:`HttpRequest` values and consumes :class:`HttpResponse`
or :class:`ByteStream` values; it never touches sockets. Any object satisfying
the :class:`Transport` protocol can be injected into ``AIClient``; tests use
in-memory fakes, production uses ``HttpxTransport``.

Contract
--------
- ``send`` returns the complete response for every HTTP status. Status codes
  are interpreted by the adapters, not by the transport.
- ``send_streaming`` returns once response headers are available. The byte
  stream yields blocks of arbitrary size in arrival order; end of stream is
  iterator exhaustion.
- Connection, TLS, DNS and read failures surface as ``TransportError``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class HttpRequest:
    """A fully resolved HTTP request.

    Attributes:
        method: ``"GET"`` or ``"POST"``.
        url: Absolute URL.
        headers: Request headers, credentials included.
        params: Query string parameters.
        json_body: JSON-serializable body for POST requests.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] = field(default_factory=dict)
    json_body: Optional[Any] = None


@dataclass
class HttpResponse:
    """A buffered HTTP response."""

    status_code: int
    content: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400


@runtime_checkable
class ByteStream(Protocol):
    """Open streaming response: status, headers and a forward-only body."""

    status_code: int
    headers: Mapping[str, str]

    def iter_bytes(self) -> Iterator[bytes]:
        ...

    def read(self) -> bytes:
        """Read the remaining body in full (used for error statuses)."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class Transport(Protocol):
    """Sends requests and returns buffered or streaming responses."""

    supports_streaming: bool

    def send(self, request: HttpRequest) -> HttpResponse:
        ...

    def send_streaming(self, request: HttpRequest) -> ByteStream:
        ...


def header_map(headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Return a plain dict with lower-cased header names."""
    return {k.lower(): v for k, v in (headers or {}).items()}


__all__ = [
    "HttpRequest",
    "HttpResponse",
    "ByteStream",
    "Transport",
    "header_map",
]
