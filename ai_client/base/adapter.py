"""Shared provider adapter contract.

An adapter is pure translation: it builds :class:`HttpRequest` values from
unified requests and parses :class:`HttpResponse` bodies (or single stream
frames) back into unified values. It never performs I/O and never retries;
``AIClient`` sends what the adapter builds.

Response parsing order (identical for every provider):

1. Body is not JSON: ``ProviderError`` for an error status, else ``ProtocolError``.
2. Provider error envelope present: ``ProviderError``, whatever the status.
3. Error status without an envelope: ``ProviderError`` classified by status.
4. Success envelope fails validation: ``ProtocolError``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import (
    ConfigurationError,
    ErrorCode,
    ProtocolError,
    ProviderError,
    UnsupportedOperation,
    code_for_status,
    excerpt,
    is_retryable,
)
from .http.transport import HttpRequest, HttpResponse
from .log_support import LogContext
from .logging import get_logger, normalized_log_event
from .models import GenerationRequest, GenerationResponse, ModelInfo, TokenCount
from .streaming import Framer, FrameResult, StreamDecoder

W = TypeVar("W", bound=BaseModel)


class BaseAdapter:
    """Base class for provider adapters.

    Subclasses set ``provider_name`` and the capability flags and implement
    the translation hooks (``to_wire``, ``from_wire``, ``detect_error``,
    ``parse_stream_frame``, ``framer``) plus the request builders.

    Raises:
        ConfigurationError: When no API key is supplied.
    """

    provider_name: str = ""
    supports_streaming: bool = True
    supports_token_counting: bool = True
    supports_model_lookup: bool = True
    # Settings the factory may pass to the constructor.
    config_keys: Tuple[str, ...] = ("api_key", "model", "base_url", "api_version", "headers")

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str],
        base_url: str,
        api_version: str,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                code=ErrorCode.AUTH,
                message=f"no API key configured for provider '{self.provider_name}'",
                provider=self.provider_name,
                setting="api_key",
            )
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version.strip("/")
        self._headers = dict(headers or {})
        self._logger = logger or get_logger(f"ai_client.{self.provider_name}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self._model!r}, base_url={self._base_url!r})"

    # ---- Configuration -----------------------------------------------------
    @property
    def default_model(self) -> Optional[str]:
        return self._model

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_version(self) -> str:
        return self._api_version

    def resolve(self, request: GenerationRequest) -> GenerationRequest:
        """Return ``request`` with its model filled from the default."""
        if request.model:
            return request
        if not self._model:
            raise ConfigurationError(
                code=ErrorCode.VALIDATION,
                message="request has no model and the client has no default model",
                provider=self.provider_name,
                setting="model",
            )
        return request.with_model(self._model)

    def endpoint(self, path: str) -> str:
        return f"{self._base_url}/{self._api_version}/{path.lstrip('/')}"

    def auth_headers(self) -> Dict[str, str]:
        return {}

    def auth_params(self) -> Dict[str, str]:
        return {}

    def http_request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> HttpRequest:
        headers = {"Accept": "application/json", **self._headers, **self.auth_headers()}
        if json_body is not None:
            headers["Content-Type"] = "application/json"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        query.update(self.auth_params())
        return HttpRequest(method=method, url=self.endpoint(path), headers=headers, params=query, json_body=json_body)

    def unsupported(self, operation: str, model: Optional[str] = None) -> UnsupportedOperation:
        return UnsupportedOperation(
            code=ErrorCode.UNSUPPORTED,
            message=f"{self.provider_name} does not support {operation}",
            provider=self.provider_name,
            model=model,
            operation=operation,
        )

    def drop_param(self, param: str, reason: str, *, model: Optional[str] = None) -> None:
        """Log a request parameter the provider cannot honor."""
        normalized_log_event(
            self._logger,
            "request.param_dropped",
            LogContext(provider=self.provider_name, model=model),
            phase="prepare",
            level=logging.WARNING,
            param=param,
            reason=reason,
        )

    # ---- Response checking -------------------------------------------------
    def detect_error(self, body: Any, status_code: Optional[int], *, model: Optional[str] = None) -> Optional[ProviderError]:
        """Return a ``ProviderError`` when ``body`` is an error envelope."""
        raise NotImplementedError

    def check_response(self, response: HttpResponse, *, model: Optional[str] = None) -> Any:
        """Decode a buffered response, raising on any error envelope or status."""
        try:
            body = json.loads(response.content) if response.content.strip() else None
        except ValueError as exc:
            if response.is_error:
                raise self.status_error(response, model=model) from exc
            raise self.protocol_error(
                f"response body is not JSON: {exc}",
                response.content,
                model=model,
                status_code=response.status_code,
                cause=exc,
            ) from exc
        err = self.detect_error(body, response.status_code, model=model)
        if err is not None:
            raise err
        if response.is_error:
            raise self.status_error(response, model=model)
        if body is None:
            raise self.protocol_error("empty response body", b"", model=model, status_code=response.status_code)
        return body

    def status_error(self, response: HttpResponse, *, model: Optional[str] = None) -> ProviderError:
        code = code_for_status(response.status_code)
        text = excerpt(response.content) if response.content else ""
        return ProviderError(
            code=code,
            message=f"HTTP {response.status_code}" + (f": {text}" if text else ""),
            provider=self.provider_name,
            model=model,
            retryable=is_retryable(code),
            raw=text or None,
            status_code=response.status_code,
        )

    def protocol_error(
        self,
        message: str,
        body: Any,
        *,
        model: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> ProtocolError:
        return ProtocolError(
            code=ErrorCode.PROTOCOL,
            message=message,
            provider=self.provider_name,
            model=model,
            raw=cause,
            status_code=status_code,
            body_excerpt=excerpt(body if isinstance(body, (bytes, bytearray, str)) else json.dumps(body, default=str)),
        )

    def validate(self, wire_cls: Type[W], body: Any, *, model: Optional[str] = None, status_code: Optional[int] = None) -> W:
        """Validate ``body`` as ``wire_cls``; failures become ``ProtocolError``."""
        try:
            return wire_cls.model_validate(body)
        except ValidationError as exc:
            raise self.protocol_error(
                f"unexpected {wire_cls.__name__} shape: {exc.error_count()} validation error(s)",
                body,
                model=model,
                status_code=status_code,
                cause=exc,
            ) from exc

    def validate_error(
        self, wire_cls: Type[W], error: Any, *, model: Optional[str] = None, status_code: Optional[int] = None
    ) -> Optional[W]:
        """Validate an ``error`` envelope body.

        A malformed envelope on an error status returns ``None`` so the caller
        falls back to status classification; anywhere else (a success status
        or an in-band stream frame) it is a ``ProtocolError``.
        """
        try:
            return wire_cls.model_validate(error)
        except ValidationError as exc:
            if status_code is not None and status_code >= 400:
                return None
            raise self.protocol_error(
                f"malformed error envelope: {exc.error_count()} validation error(s)",
                {"error": error},
                model=model,
                status_code=status_code,
                cause=exc,
            ) from exc

    # ---- Translation hooks ---------------------------------------------------
    def to_wire(self, request: GenerationRequest, *, stream: bool = False) -> BaseModel:
        raise NotImplementedError

    def from_wire(self, wire: Any) -> GenerationResponse:
        raise NotImplementedError

    def framer(self) -> Framer:
        raise NotImplementedError

    def parse_stream_frame(self, frame: bytes) -> FrameResult:
        raise NotImplementedError

    def new_decoder(self, model: Optional[str] = None) -> StreamDecoder:
        return StreamDecoder(self.framer(), self.parse_stream_frame, provider=self.provider_name, model=model)

    # ---- Operations ----------------------------------------------------------
    def build_generate_request(self, request: GenerationRequest, *, stream: bool = False) -> HttpRequest:
        raise NotImplementedError

    def parse_generate_response(self, response: HttpResponse, *, model: Optional[str] = None) -> GenerationResponse:
        raise NotImplementedError

    def build_count_tokens_request(self, request: GenerationRequest) -> HttpRequest:
        raise self.unsupported("count_tokens", request.model)

    def parse_count_tokens_response(self, response: HttpResponse, *, model: Optional[str] = None) -> TokenCount:
        raise self.unsupported("count_tokens", model)

    def build_list_models_request(self, page_token: Optional[str] = None) -> HttpRequest:
        raise NotImplementedError

    def parse_list_models_response(self, response: HttpResponse) -> Tuple[List[ModelInfo], Optional[str]]:
        raise NotImplementedError

    def build_get_model_request(self, model_id: str) -> HttpRequest:
        raise self.unsupported("get_model", model_id)

    def parse_get_model_response(self, response: HttpResponse, *, model: Optional[str] = None) -> ModelInfo:
        raise self.unsupported("get_model", model)


__all__ = ["BaseAdapter"]
