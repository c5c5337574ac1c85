"""Timeout configuration for the default HTTP transport.

The core never enforces timeouts itself; the shipped ``HttpxTransport``
builds its ``httpx.Timeout`` from :func:`get_timeout_config`. Values come
from the environment (all optional, positive floats, seconds):

    AI_CLIENT_CONNECT_TIMEOUT_SECONDS   connection establishment
    AI_CLIENT_HTTP_TIMEOUT_SECONDS      non-streaming read timeout
    AI_CLIENT_STREAM_TIMEOUT_SECONDS    idle gap between streamed blocks

The parsed config is cached and refreshed when any of the variables change.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

_ENV_NAMES = (
    "AI_CLIENT_CONNECT_TIMEOUT_SECONDS",
    "AI_CLIENT_HTTP_TIMEOUT_SECONDS",
    "AI_CLIENT_STREAM_TIMEOUT_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Budget for establishing the connection.
        http_timeout_seconds: Read timeout for buffered requests.
        stream_timeout_seconds: Maximum idle gap while reading a stream.
    """

    connect_timeout_seconds: float = 10.0
    http_timeout_seconds: float = 60.0
    stream_timeout_seconds: float = 120.0

    def as_httpx(self, *, streaming: bool = False) -> httpx.Timeout:
        """Return the equivalent ``httpx.Timeout``."""
        read = self.stream_timeout_seconds if streaming else self.http_timeout_seconds
        return httpx.Timeout(read, connect=self.connect_timeout_seconds)


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, returning ``default`` otherwise."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        http_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.http_timeout_seconds),
        stream_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.stream_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
