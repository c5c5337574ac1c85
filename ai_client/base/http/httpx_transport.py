"""Default :class:`Transport` implementation over ``httpx``.

Uses the pooled clients from :mod:`ai_client.base.http.client` unless a
client is injected (tests pass ``httpx.Client(transport=httpx.MockTransport(...))``).
``httpx.HTTPError`` is translated into :class:`TransportError` with a
normalized code; HTTP error statuses are returned untouched for the adapters
to classify.
"""
from __future__ import annotations

from typing import Iterator, Optional

import httpx

from ..errors import TransportError, classify_exception, is_retryable
from ..logging import get_logger
from ..timeouts import TimeoutConfig, get_timeout_config
from .client import get_httpx_client
from .transport import HttpRequest, HttpResponse, header_map

_logger = get_logger("ai_client.http")


def _transport_error(exc: httpx.HTTPError, request: HttpRequest, *, provider: Optional[str]) -> TransportError:
    code = classify_exception(exc)
    return TransportError(
        code=code,
        message=f"{type(exc).__name__} during {request.method} {request.url}: {exc}",
        provider=provider,
        retryable=is_retryable(code),
        raw=exc,
    )


class HttpxByteStream:
    """Wraps a streaming ``httpx.Response`` as a ``ByteStream``."""

    def __init__(self, response: httpx.Response, request: HttpRequest, *, provider: Optional[str] = None) -> None:
        self._response = response
        self._request = request
        self._provider = provider
        self.status_code = response.status_code
        self.headers = header_map(response.headers)

    def iter_bytes(self) -> Iterator[bytes]:
        try:
            for block in self._response.iter_bytes():
                if block:
                    yield block
        except httpx.HTTPError as exc:
            raise _transport_error(exc, self._request, provider=self._provider) from exc

    def read(self) -> bytes:
        try:
            return self._response.read()
        except httpx.HTTPError as exc:
            raise _transport_error(exc, self._request, provider=self._provider) from exc

    def close(self) -> None:
        self._response.close()


class HttpxTransport:
    """Synchronous ``httpx`` transport.

    Parameters
    ----------
    client:
        Optional preconfigured ``httpx.Client``; defaults to the pooled
        client for ``purpose``.
    purpose:
        Pool key discriminator (usually the provider name).
    timeouts:
        Optional :class:`TimeoutConfig`; defaults to :func:`get_timeout_config`.
    """

    supports_streaming = True

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        purpose: str = "default",
        timeouts: Optional[TimeoutConfig] = None,
    ) -> None:
        self._client = client
        self._purpose = purpose
        self._timeouts = timeouts

    @property
    def client(self) -> httpx.Client:
        return self._client if self._client is not None else get_httpx_client(None, self._purpose)

    def _timeout(self, *, streaming: bool) -> httpx.Timeout:
        return (self._timeouts or get_timeout_config()).as_httpx(streaming=streaming)

    def _build(self, request: HttpRequest, *, streaming: bool) -> httpx.Request:
        return self.client.build_request(
            request.method,
            request.url,
            headers=dict(request.headers),
            params=dict(request.params) or None,
            json=request.json_body,
            timeout=self._timeout(streaming=streaming),
        )

    def send(self, request: HttpRequest) -> HttpResponse:
        try:
            resp = self.client.send(self._build(request, streaming=False))
        except httpx.HTTPError as exc:
            raise _transport_error(exc, request, provider=self._purpose) from exc
        _logger.debug("%s %s -> %s", request.method, request.url, resp.status_code)
        return HttpResponse(status_code=resp.status_code, content=resp.content, headers=header_map(resp.headers))

    def send_streaming(self, request: HttpRequest) -> HttpxByteStream:
        try:
            resp = self.client.send(self._build(request, streaming=True), stream=True)
        except httpx.HTTPError as exc:
            raise _transport_error(exc, request, provider=self._purpose) from exc
        _logger.debug("%s %s -> %s (stream)", request.method, request.url, resp.status_code)
        return HttpxByteStream(resp, request, provider=self._purpose)


__all__ = ["HttpxTransport", "HttpxByteStream"]
