"""
Structured client error exception types.

Every failure surfaced by the client is a :class:`ClientError` subclass
carrying a normalized :class:`ErrorCode`, which keeps handling, retry
decisions and structured logging uniform across providers and transports.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ClientError(Exception):
    """Base class for all errors raised by the client.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        provider: Provider key where the error originated (e.g., ``"openai"``).
        model: Optional model name associated with the failure.
        retryable: Hint for upstream retry logic (not authoritative).
        raw: Optional original exception or payload for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: Optional[str] = None
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.provider or '-'}:{self.model or '-'} {self.code.value}: {self.message}"


@dataclass(eq=False)
class TransportError(ClientError):
    """The HTTP exchange itself failed (DNS, TLS, connect, read)."""


@dataclass(eq=False)
class ProtocolError(ClientError):
    """A response body matched neither the success nor the error envelope.

    ``body_excerpt`` holds the leading part of the offending body.
    """

    status_code: Optional[int] = None
    body_excerpt: Optional[str] = None


@dataclass(eq=False)
class ProviderError(ClientError):
    """The provider answered with an application-level error envelope.

    Attributes:
        status_code: HTTP status of the response carrying the envelope.
        provider_code: The provider's own code or status string
            (e.g. ``"RESOURCE_EXHAUSTED"`` or ``"insufficient_quota"``).
        details: Provider-specific detail payload, passed through untouched.
    """

    status_code: Optional[int] = None
    provider_code: Optional[str] = None
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        status = f" [{self.status_code}]" if self.status_code is not None else ""
        return f"{self.provider or '-'}:{self.model or '-'} {self.code.value}{status}: {self.message}"


@dataclass(eq=False)
class StreamDecodeError(ClientError):
    """A stream frame could not be parsed; the stream is terminated."""

    frame_excerpt: Optional[str] = None
    chunks_emitted: int = 0


@dataclass(eq=False)
class UnsupportedOperation(ClientError):
    """The provider or transport lacks a requested capability."""

    operation: Optional[str] = None


@dataclass(eq=False)
class ConfigurationError(ClientError):
    """Client construction failed because of missing or invalid settings."""

    setting: Optional[str] = None


EXCERPT_LIMIT = 512


def excerpt(data: Any, limit: int = EXCERPT_LIMIT) -> str:
    """Return a bounded text excerpt of ``data`` for error payloads."""
    if isinstance(data, (bytes, bytearray)):
        text = bytes(data).decode("utf-8", errors="replace")
    else:
        text = str(data)
    return text if len(text) <= limit else text[:limit] + "..."


__all__ = [
    "ClientError",
    "TransportError",
    "ProtocolError",
    "ProviderError",
    "StreamDecodeError",
    "UnsupportedOperation",
    "ConfigurationError",
    "EXCERPT_LIMIT",
    "excerpt",
]
