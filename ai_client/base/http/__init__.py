"""HTTP package: transport protocol, httpx transport and pooled clients."""

from .client import get_httpx_client, close_all_clients
from .transport import ByteStream, HttpRequest, HttpResponse, Transport
from .httpx_transport import HttpxByteStream, HttpxTransport

__all__ = [
    "get_httpx_client",
    "close_all_clients",
    "ByteStream",
    "HttpRequest",
    "HttpResponse",
    "Transport",
    "HttpxByteStream",
    "HttpxTransport",
]
