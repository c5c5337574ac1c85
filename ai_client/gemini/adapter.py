"""Gemini (Generative Language API) adapter.

Purpose:
    Translate unified requests into ``generateContent`` /
    ``streamGenerateContent`` / ``countTokens`` / ``models`` REST calls and
    parse the responses back.

Wire notes:
    - Auth uses the ``x-goog-api-key`` header, or the ``key`` query parameter
      when ``auth_mode="query"``.
    - System messages become ``systemInstruction``; ``assistant`` turns use
      the ``model`` role.
    - ``streamGenerateContent`` answers with a JSON array of
      ``GenerateContentResponse`` objects; the closing ``]`` ends the stream.
    - Errors arrive as ``{"error": {"code", "message", "status", "details"}}``,
      wrapped in a one-element array on the streaming endpoint.
    - A response with no candidates and ``promptFeedback.blockReason`` is a
      safety block and surfaces as ``ProviderError(code=content_filter)``.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..base.adapter import BaseAdapter
from ..base.errors import ConfigurationError, ErrorCode, ProviderError, code_for_provider_status, is_retryable
from ..base.http.transport import HttpRequest, HttpResponse
from ..base.models import (
    Candidate,
    ContentPart,
    FinishReason,
    GenerationRequest,
    GenerationResponse,
    Message,
    ModelInfo,
    StreamChunk,
    TokenCount,
    Usage,
)
from ..base.streaming import FrameResult, Framer, JsonArrayFramer
from ..config.defaults import (
    GEMINI_DEFAULT_API_VERSION,
    GEMINI_DEFAULT_AUTH_MODE,
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_LIST_MODELS_PAGE_SIZE,
)
from . import wire_types as wt

_FINISH_REASONS: Dict[str, FinishReason] = {
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "content_filter",
    "RECITATION": "content_filter",
    "BLOCKLIST": "content_filter",
    "PROHIBITED_CONTENT": "content_filter",
    "SPII": "content_filter",
    "IMAGE_SAFETY": "content_filter",
    "LANGUAGE": "error",
    "MALFORMED_FUNCTION_CALL": "error",
    "OTHER": "error",
}

_ROLES = {"user": "user", "assistant": "model"}


def map_finish_reason(raw: Optional[str]) -> Optional[FinishReason]:
    if not raw or raw == "FINISH_REASON_UNSPECIFIED":
        return None
    return _FINISH_REASONS.get(raw.upper(), "unknown")


def model_path(model: str) -> str:
    """Return the resource path for ``model`` (``models/`` prefix added once)."""
    model = model.strip("/")
    return model if "/" in model else f"models/{model}"


def _model_id(name: str) -> str:
    return name[len("models/") :] if name.startswith("models/") else name


def _harm_category(raw: str) -> Optional[wt.HarmCategory]:
    key = raw.strip().upper()
    if not key.startswith("HARM_CATEGORY_"):
        key = "HARM_CATEGORY_" + key
    try:
        return wt.HarmCategory(key)
    except ValueError:
        return None


def _harm_threshold(raw: str) -> Optional[wt.HarmBlockThreshold]:
    try:
        return wt.HarmBlockThreshold(raw.strip().upper())
    except ValueError:
        return None


def _usage(meta: Optional[wt.UsageMetadata]) -> Optional[Usage]:
    if meta is None:
        return None
    return Usage(
        prompt_tokens=meta.prompt_token_count,
        completion_tokens=meta.candidates_token_count,
        total_tokens=meta.total_token_count,
    )


class GeminiAdapter(BaseAdapter):
    """Adapter for the Gemini REST API.

    Parameters
    ----------
    api_key:
        Gemini API key (required).
    model:
        Default model id, with or without the ``models/`` prefix.
    base_url / api_version:
        Endpoint overrides; default to the public ``v1beta`` API.
    auth_mode:
        ``"header"`` (default) or ``"query"``.
    headers:
        Static headers added to every request.
    """

    provider_name = "gemini"
    config_keys = BaseAdapter.config_keys + ("auth_mode",)

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        auth_mode: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            api_key=api_key,
            model=_model_id(model) if model else None,
            base_url=base_url or GEMINI_DEFAULT_BASE_URL,
            api_version=api_version or GEMINI_DEFAULT_API_VERSION,
            headers=headers,
            **kwargs,
        )
        mode = (auth_mode or GEMINI_DEFAULT_AUTH_MODE).lower()
        if mode not in ("header", "query"):
            raise ValueError(f"auth_mode must be 'header' or 'query', got {auth_mode!r}")
        self._auth_mode = mode

    def auth_headers(self) -> Dict[str, str]:
        return {"x-goog-api-key": self._api_key} if self._auth_mode == "header" else {}

    def auth_params(self) -> Dict[str, str]:
        return {"key": self._api_key} if self._auth_mode == "query" else {}

    # ---- Request translation -------------------------------------------------
    @staticmethod
    def _part(part: ContentPart) -> wt.Part:
        if part.is_text:
            return wt.Part(text=part.text)
        return wt.Part(inline_data=wt.InlineData(mime_type=part.mime_type, data=part.data))

    def _content(self, message: Message) -> wt.Content:
        return wt.Content(role=_ROLES[message.role], parts=[self._part(p) for p in message.parts()])

    def _system_instruction(self, request: GenerationRequest) -> Optional[wt.Content]:
        system = request.system_messages()
        if not system:
            return None
        return wt.Content(parts=[self._part(p) for m in system for p in m.parts()])

    def _generation_config(self, request: GenerationRequest) -> Optional[wt.GenerationConfig]:
        config = wt.GenerationConfig(
            stop_sequences=list(request.stop_sequences) or None,
            candidate_count=request.candidate_count,
            max_output_tokens=request.max_output_tokens,
            temperature=request.temperature,
            top_p=request.top_p,
            top_k=request.top_k,
            response_mime_type="application/json" if request.response_format == "json_object" else None,
        )
        return None if config.is_empty() else config

    def _safety_settings(self, request: GenerationRequest) -> Optional[List[wt.SafetySetting]]:
        out: List[wt.SafetySetting] = []
        for category, threshold in request.safety_settings.items():
            cat = _harm_category(category)
            thr = _harm_threshold(threshold)
            if cat is None or thr is None:
                self.drop_param(
                    f"safety_settings.{category}",
                    f"unknown harm category or threshold: {category}={threshold}",
                    model=request.model,
                )
                continue
            out.append(wt.SafetySetting(category=cat, threshold=thr))
        return out or None

    def to_wire(self, request: GenerationRequest, *, stream: bool = False) -> wt.GenerateContentRequest:
        """Build the ``GenerateContentRequest`` body for ``request``."""
        contents = [self._content(m) for m in request.conversation()]
        if not contents:
            # systemInstruction alone is rejected; contents needs a user turn.
            raise ConfigurationError(
                code=ErrorCode.VALIDATION,
                message="gemini requests need at least one non-system message",
                provider=self.provider_name,
                model=request.model,
                setting="messages",
            )
        if request.reasoning_effort is not None:
            self.drop_param("reasoning_effort", "not supported by gemini", model=request.model)
        return wt.GenerateContentRequest(
            contents=contents,
            system_instruction=self._system_instruction(request),
            generation_config=self._generation_config(request),
            safety_settings=self._safety_settings(request),
        )

    def build_generate_request(self, request: GenerationRequest, *, stream: bool = False) -> HttpRequest:
        request = self.resolve(request)
        body = self.to_wire(request, stream=stream).to_wire()
        body.update(request.extra)
        action = "streamGenerateContent" if stream else "generateContent"
        return self.http_request("POST", f"{model_path(request.model)}:{action}", json_body=body)

    # ---- Response translation ------------------------------------------------
    def detect_error(self, body: Any, status_code: Optional[int], *, model: Optional[str] = None) -> Optional[ProviderError]:
        if isinstance(body, list) and len(body) == 1:
            body = body[0]
        if not isinstance(body, dict) or not isinstance(body.get("error"), dict):
            return None
        detail = self.validate_error(wt.ErrorDetail, body["error"], model=model, status_code=status_code)
        if detail is None:
            return None
        status = status_code if status_code and status_code >= 400 else None
        if status is None and isinstance(detail.code, int):
            status = detail.code
        code = code_for_provider_status(detail.status, status)
        return ProviderError(
            code=code,
            message=detail.message or detail.status or "unknown gemini error",
            provider=self.provider_name,
            model=model,
            retryable=is_retryable(code),
            raw=body,
            status_code=status,
            provider_code=detail.status,
            details=detail.details,
        )

    def _blocked_error(self, wire: wt.GenerateContentResponse, *, model: Optional[str]) -> ProviderError:
        reason = wire.prompt_feedback.block_reason if wire.prompt_feedback else None
        return ProviderError(
            code=ErrorCode.CONTENT_FILTER,
            message=f"prompt blocked by provider safety filters ({reason})",
            provider=self.provider_name,
            model=model,
            provider_code=reason,
            details=wire.prompt_feedback.safety_ratings if wire.prompt_feedback else None,
        )

    def from_wire(self, wire: wt.GenerateContentResponse) -> GenerationResponse:
        candidates = [
            Candidate(
                index=c.index if c.index is not None else pos,
                text=c.text(),
                finish_reason=map_finish_reason(c.finish_reason),
            )
            for pos, c in enumerate(wire.candidates)
        ]
        return GenerationResponse(
            candidates=candidates,
            usage=_usage(wire.usage_metadata),
            model=wire.model_version,
            response_id=wire.response_id,
            provider=self.provider_name,
        )

    def parse_generate_response(self, response: HttpResponse, *, model: Optional[str] = None) -> GenerationResponse:
        body = self.check_response(response, model=model)
        wire = self.validate(wt.GenerateContentResponse, body, model=model, status_code=response.status_code)
        if wire.blocked:
            raise self._blocked_error(wire, model=model)
        if not wire.candidates:
            raise self.protocol_error("response carried no candidates", body, model=model, status_code=response.status_code)
        return self.from_wire(wire)

    # ---- Streaming -----------------------------------------------------------
    def framer(self) -> Framer:
        return JsonArrayFramer()

    def parse_stream_frame(self, frame: bytes) -> FrameResult:
        body = json.loads(frame)
        err = self.detect_error(body, None)
        if err is not None:
            raise err
        wire = wt.GenerateContentResponse.model_validate(body)
        if wire.blocked:
            raise self._blocked_error(wire, model=wire.model_version)
        chunks = [
            StreamChunk(
                candidate_index=c.index if c.index is not None else pos,
                delta=c.text(),
                finish_reason=map_finish_reason(c.finish_reason),
                model=wire.model_version,
                response_id=wire.response_id,
            )
            for pos, c in enumerate(wire.candidates)
        ]
        usage = _usage(wire.usage_metadata)
        if usage is not None:
            if chunks:
                chunks[-1].usage = usage
            else:
                chunks.append(StreamChunk(usage=usage, model=wire.model_version, response_id=wire.response_id))
        return chunks

    # ---- Token counting ------------------------------------------------------
    def build_count_tokens_request(self, request: GenerationRequest) -> HttpRequest:
        request = self.resolve(request)
        inner = self.to_wire(request)
        inner.model = model_path(request.model)
        body = wt.CountTokensRequest(generate_content_request=inner).to_wire()
        return self.http_request("POST", f"{model_path(request.model)}:countTokens", json_body=body)

    def parse_count_tokens_response(self, response: HttpResponse, *, model: Optional[str] = None) -> TokenCount:
        body = self.check_response(response, model=model)
        wire = self.validate(wt.CountTokensResponse, body, model=model, status_code=response.status_code)
        return TokenCount(total_tokens=wire.total_tokens, model=model)

    # ---- Models --------------------------------------------------------------
    def to_model_info(self, wire: wt.Model) -> ModelInfo:
        methods = set(wire.supported_generation_methods)
        return ModelInfo(
            id=_model_id(wire.name),
            display_name=wire.display_name or _model_id(wire.name),
            provider=self.provider_name,
            context_window=wire.input_token_limit,
            output_token_limit=wire.output_token_limit,
            supports_streaming=("streamGenerateContent" in methods) if methods else None,
            supports_multi_turn=("generateContent" in methods) if methods else None,
            description=wire.description,
            owned_by="google",
        )

    def build_list_models_request(self, page_token: Optional[str] = None) -> HttpRequest:
        return self.http_request(
            "GET",
            "models",
            params={"pageSize": GEMINI_LIST_MODELS_PAGE_SIZE, "pageToken": page_token},
        )

    def parse_list_models_response(self, response: HttpResponse) -> Tuple[List[ModelInfo], Optional[str]]:
        body = self.check_response(response)
        wire = self.validate(wt.ListModelsResponse, body, status_code=response.status_code)
        return [self.to_model_info(m) for m in wire.models], wire.next_page_token or None

    def build_get_model_request(self, model_id: str) -> HttpRequest:
        return self.http_request("GET", model_path(model_id))

    def parse_get_model_response(self, response: HttpResponse, *, model: Optional[str] = None) -> ModelInfo:
        body = self.check_response(response, model=model)
        return self.to_model_info(self.validate(wt.Model, body, model=model, status_code=response.status_code))


__all__ = ["GeminiAdapter", "map_finish_reason", "model_path"]
