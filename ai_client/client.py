"""AIClient: the provider-bound client facade.

An ``AIClient`` pairs exactly one provider adapter with one transport. The
adapter builds requests and parses responses; the transport moves bytes; the
client sequences the two and emits structured ``<operation>.start|end|error``
log events. It holds only immutable configuration and is safe to share
between threads when the transport is.

No retries happen here. Every failure propagates as a ``ClientError``
subclass, and unsupported operations fail before any network call.
"""
from __future__ import annotations

import time
from typing import Callable, List, Optional, Set, TypeVar

from .base.adapter import BaseAdapter
from .base.errors import ClientError, ErrorCode, UnsupportedOperation, classify_exception
from .base.http import HttpRequest, HttpResponse, HttpxTransport, Transport
from .base.log_support import LogContext
from .base.logging import get_logger, normalized_log_event
from .base.models import GenerationRequest, GenerationResponse, ModelInfo, TokenCount
from .base.streaming import ChunkStream
from .config.defaults import LIST_MODELS_MAX_PAGES

T = TypeVar("T")


class AIClient:
    """Unified client bound to one provider.

    Parameters
    ----------
    adapter:
        Provider adapter (``GeminiAdapter``, ``OpenAIAdapter``).
    transport:
        Object implementing the ``Transport`` protocol. Defaults to an
        ``HttpxTransport`` pooled per provider.

    Example
    -------
    >>> client = create_client("gemini", api_key="...")  # doctest: +SKIP
    >>> req = GenerationRequest(messages=[Message("user", "2+2?")])  # doctest: +SKIP
    >>> client.generate(req).text  # doctest: +SKIP
    '4'
    """

    def __init__(self, adapter: BaseAdapter, transport: Optional[Transport] = None) -> None:
        self._adapter = adapter
        self._transport = transport if transport is not None else HttpxTransport(purpose=adapter.provider_name)
        self._logger = get_logger(f"ai_client.{adapter.provider_name}")

    def __repr__(self) -> str:
        return f"AIClient(provider={self.provider_name!r}, model={self.default_model!r})"

    # ---- Introspection -------------------------------------------------------
    @property
    def provider_name(self) -> str:
        return self._adapter.provider_name

    @property
    def default_model(self) -> Optional[str]:
        return self._adapter.default_model

    @property
    def adapter(self) -> BaseAdapter:
        return self._adapter

    @property
    def transport(self) -> Transport:
        return self._transport

    def supports_streaming(self) -> bool:
        """True when both the adapter and the transport can stream."""
        return bool(self._adapter.supports_streaming and getattr(self._transport, "supports_streaming", False))

    # ---- Helpers -------------------------------------------------------------
    def _ctx(self, operation: str, model: Optional[str]) -> LogContext:
        return LogContext(provider=self.provider_name, model=model, operation=operation)

    def _unsupported(self, operation: str, model: Optional[str], reason: str) -> UnsupportedOperation:
        err = UnsupportedOperation(
            code=ErrorCode.UNSUPPORTED,
            message=f"{operation} is not available: {reason}",
            provider=self.provider_name,
            model=model,
            operation=operation,
        )
        normalized_log_event(
            self._logger,
            f"{operation}.error",
            self._ctx(operation, model),
            phase="start",
            error_code=err.code.value,
            emitted=False,
            message=err.message,
        )
        return err

    def _call(
        self,
        operation: str,
        model: Optional[str],
        request: HttpRequest,
        parse: Callable[[HttpResponse], T],
        summarize: Optional[Callable[[T], dict]] = None,
    ) -> T:
        """Send one buffered request and parse it, logging the lifecycle."""
        ctx = self._ctx(operation, model)
        started = time.monotonic()
        normalized_log_event(self._logger, f"{operation}.start", ctx, phase="start")
        try:
            result = parse(self._transport.send(request))
        except ClientError as exc:
            normalized_log_event(
                self._logger,
                f"{operation}.error",
                ctx,
                phase="error",
                error_code=classify_exception(exc).value,
                emitted=False,
                message=exc.message,
                duration_ms=(time.monotonic() - started) * 1000.0,
            )
            raise
        fields = summarize(result) if summarize else {}
        normalized_log_event(
            self._logger,
            f"{operation}.end",
            ctx,
            phase="finalize",
            emitted=True,
            duration_ms=(time.monotonic() - started) * 1000.0,
            **fields,
        )
        return result

    # ---- Operations ----------------------------------------------------------
    def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Run a single buffered generation."""
        request = self._adapter.resolve(request)
        http = self._adapter.build_generate_request(request, stream=False)
        return self._call(
            "generate",
            request.model,
            http,
            lambda resp: self._adapter.parse_generate_response(resp, model=request.model),
            lambda result: {
                "tokens": result.usage.to_dict() if result.usage else None,
                "candidates": len(result.candidates),
                "finish_reason": result.finish_reason,
            },
        )

    def generate_streamed(self, request: GenerationRequest) -> ChunkStream:
        """Open a streamed generation.

        Returns once response headers are available. An error status is read
        in full and raised as ``ProviderError`` here; failures after that are
        raised while iterating the returned stream.

        Raises:
            UnsupportedOperation: When the adapter or the transport cannot
                stream. Nothing is sent in that case.
        """
        request = self._adapter.resolve(request)
        if not self._adapter.supports_streaming:
            raise self._unsupported("stream", request.model, f"{self.provider_name} adapter cannot stream")
        if not getattr(self._transport, "supports_streaming", False):
            raise self._unsupported("stream", request.model, "transport cannot stream")
        http = self._adapter.build_generate_request(request, stream=True)
        ctx = self._ctx("stream", request.model)
        normalized_log_event(self._logger, "stream.start", ctx, phase="start")
        try:
            body = self._transport.send_streaming(http)
            if body.status_code >= 400:
                try:
                    content = body.read()
                finally:
                    body.close()
                self._adapter.check_response(
                    HttpResponse(status_code=body.status_code, content=content, headers=body.headers),
                    model=request.model,
                )
        except ClientError as exc:
            normalized_log_event(
                self._logger,
                "stream.error",
                ctx,
                phase="start",
                error_code=classify_exception(exc).value,
                emitted=False,
                message=exc.message,
            )
            raise
        decoder = self._adapter.new_decoder(request.model)
        return ChunkStream(body, decoder, logger=self._logger, ctx=ctx)

    def count_tokens(self, request: GenerationRequest) -> TokenCount:
        """Count the prompt tokens of ``request`` with the provider's tokenizer."""
        request = self._adapter.resolve(request)
        if not self._adapter.supports_token_counting:
            raise self._unsupported("count_tokens", request.model, f"{self.provider_name} offers no token counting")
        http = self._adapter.build_count_tokens_request(request)
        return self._call(
            "count_tokens",
            request.model,
            http,
            lambda resp: self._adapter.parse_count_tokens_response(resp, model=request.model),
            lambda result: {"total_tokens": result.total_tokens},
        )

    def list_models(self) -> List[ModelInfo]:
        """List every model, following pagination tokens."""
        models: List[ModelInfo] = []
        seen: Set[str] = set()
        token: Optional[str] = None
        for _ in range(LIST_MODELS_MAX_PAGES):
            page, token = self._call(
                "list_models",
                None,
                self._adapter.build_list_models_request(token),
                self._adapter.parse_list_models_response,
                lambda result: {"count": len(result[0]), "more": result[1] is not None},
            )
            models.extend(page)
            if not token or token in seen:
                break
            seen.add(token)
        return models

    def get_model(self, model_id: Optional[str] = None) -> ModelInfo:
        """Describe one model (the default model when ``model_id`` is omitted)."""
        model_id = model_id or self.default_model
        if not model_id:
            raise self._unsupported("get_model", None, "no model id given and no default model configured")
        if not self._adapter.supports_model_lookup:
            raise self._unsupported("get_model", model_id, f"{self.provider_name} offers no model lookup")
        return self._call(
            "get_model",
            model_id,
            self._adapter.build_get_model_request(model_id),
            lambda resp: self._adapter.parse_get_model_response(resp, model=model_id),
        )


__all__ = ["AIClient"]
