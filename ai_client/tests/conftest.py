"""Pytest configuration for the ai_client test suite.

Provides:
- ``isolated_env``: autouse fixture clearing provider variables and config
  caches so tests never read the developer's real keys or ``.env`` file.
- ``log_capture``: collects structured events emitted under ``ai_client``.
- ``FakeTransport`` / ``FakeByteStream``: in-memory transport doubles
  recording every request (exposed through the ``fake_transport`` fixture).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

import pytest

from ai_client.base.http import HttpRequest, HttpResponse
from ai_client.base.logging import BASE_LOGGER_NAME, get_logger
from ai_client.config import reset_config_cache

_PROVIDER_VARS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_BASE_URL",
    "GEMINI_API_VERSION",
    "GEMINI_AUTH_MODE",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OPENAI_API_VERSION",
    "OPENAI_ORGANIZATION",
    "OPENAI_API",
    "AI_CLIENT_CONFIG_FILE",
    "AI_CLIENT_LOG_LEVEL",
    "AI_CLIENT_CONNECT_TIMEOUT_SECONDS",
    "AI_CLIENT_HTTP_TIMEOUT_SECONDS",
    "AI_CLIENT_STREAM_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Run every test without ambient provider configuration."""
    for name in _PROVIDER_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AI_CLIENT_DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    yield
    reset_config_cache()


class _EventHandler(logging.Handler):
    """Decode JSON log messages into dicts."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.events: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            return
        if isinstance(payload, dict):
            payload.setdefault("level", record.levelname)
            self.events.append(payload)


@pytest.fixture()
def log_capture() -> Iterator[List[Dict[str, Any]]]:
    """Yield the list of structured events logged during the test."""
    base = get_logger(BASE_LOGGER_NAME)
    handler = _EventHandler()
    previous = base.level
    base.setLevel(logging.DEBUG)
    base.addHandler(handler)
    try:
        yield handler.events
    finally:
        base.removeHandler(handler)
        base.setLevel(previous)


class FakeByteStream:
    """Streaming body replaying fixed blocks, optionally failing mid-way."""

    def __init__(
        self,
        blocks: Sequence[bytes],
        *,
        status_code: int = 200,
        headers: Optional[Dict[str, str]] = None,
        fail_with: Optional[BaseException] = None,
    ) -> None:
        self.status_code = status_code
        self.headers = headers or {}
        self._blocks = list(blocks)
        self._fail_with = fail_with
        self.blocks_read = 0
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    def iter_bytes(self) -> Iterator[bytes]:
        for block in self._blocks:
            if self.closed:
                return
            self.blocks_read += 1
            yield block
        if self._fail_with is not None:
            raise self._fail_with

    def read(self) -> bytes:
        return b"".join(self._blocks)

    def close(self) -> None:
        self.close_calls += 1


class FakeTransport:
    """Transport double returning queued responses and recording requests."""

    def __init__(self, *, supports_streaming: bool = True) -> None:
        self.supports_streaming = supports_streaming
        self.requests: List[HttpRequest] = []
        self.responses: List[HttpResponse] = []
        self.streams: List[FakeByteStream] = []

    def queue_json(self, body: Any, status_code: int = 200) -> "FakeTransport":
        self.responses.append(HttpResponse(status_code=status_code, content=json.dumps(body).encode("utf-8")))
        return self

    def queue_stream(self, stream: FakeByteStream) -> "FakeTransport":
        self.streams.append(stream)
        return self

    def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        return self.responses.pop(0)

    def send_streaming(self, request: HttpRequest) -> FakeByteStream:
        self.requests.append(request)
        return self.streams.pop(0)


def split_every(data: bytes, size: int) -> List[bytes]:
    """Split ``data`` into blocks of ``size`` bytes."""
    return [data[i : i + size] for i in range(0, len(data), size)]


@pytest.fixture()
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def make_stream():
    """Factory fixture building ``FakeByteStream`` instances."""
    return FakeByteStream


@pytest.fixture()
def splitter():
    return split_every
