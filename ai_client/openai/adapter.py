"""OpenAI adapter.

Purpose:
    Translate unified requests into ``/v1/chat/completions`` calls (buffered
    or Server-Sent Events) and ``/v1/models`` lookups, and parse the results.
    With ``api="responses"`` generation goes through ``/v1/responses``
    instead (see :mod:`ai_client.openai.responses`).

Parameter mapping:
    - ``max_output_tokens`` → ``max_completion_tokens``; ``candidate_count`` → ``n``.
    - ``stop_sequences`` → ``stop`` (at most four; extras are dropped).
    - ``response_format="json_object"`` → ``{"type": "json_object"}``.
    - Reasoning model families (``o1``, ``o3``, ``o4``, ``gpt-5``) reject
      ``temperature``/``top_p``; other models reject ``reasoning_effort``.
    - ``top_k`` and ``safety_settings`` have no equivalent.
    Every dropped parameter is logged as a ``request.param_dropped`` event.

Token counting is not offered by this API; the adapter reports the
capability as absent so the client fails before any network call.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..base.adapter import BaseAdapter
from ..base.errors import ErrorCode, ProviderError, code_for_provider_status, is_retryable
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
    Usage,
)
from ..base.streaming import END_OF_STREAM, FrameResult, Framer, SseFramer
from ..config.defaults import (
    OPENAI_APIS,
    OPENAI_DEFAULT_API,
    OPENAI_DEFAULT_API_VERSION,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_MAX_STOP_SEQUENCES,
    OPENAI_REASONING_MODEL_PREFIXES,
)
from . import wire_types as wt
from .responses import ResponsesApiMixin

DONE_SENTINEL = b"[DONE]"

_FINISH_REASONS: Dict[str, FinishReason] = {
    "stop": "stop",
    "length": "length",
    "content_filter": "content_filter",
}

_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
}


def map_finish_reason(raw: Optional[str]) -> Optional[FinishReason]:
    if not raw:
        return None
    return _FINISH_REASONS.get(raw, "unknown")


def is_reasoning_model(model: str) -> bool:
    name = model.rsplit("/", 1)[-1].lower()
    return name.startswith(OPENAI_REASONING_MODEL_PREFIXES)


def _usage(usage: Optional[wt.CompletionUsage]) -> Optional[Usage]:
    if usage is None:
        return None
    return Usage(
        prompt_tokens=usage.prompt_tokens,
        completion_tokens=usage.completion_tokens,
        total_tokens=usage.total_tokens,
    )


class OpenAIAdapter(ResponsesApiMixin, BaseAdapter):
    """Adapter for the OpenAI REST API.

    Parameters
    ----------
    api_key:
        Bearer token (required).
    model:
        Default model id.
    base_url / api_version:
        Endpoint overrides; default to ``https://api.openai.com`` and ``v1``.
        Compatible gateways work as long as they follow the same contract.
    organization:
        Optional ``OpenAI-Organization`` header value.
    api:
        ``"chat"`` (default) or ``"responses"``; selects the generation
        endpoint. Model listing is the same for both.
    headers:
        Static headers added to every request.
    """

    provider_name = "openai"
    supports_token_counting = False
    config_keys = BaseAdapter.config_keys + ("organization", "api")

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        organization: Optional[str] = None,
        api: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url or OPENAI_DEFAULT_BASE_URL,
            api_version=api_version or OPENAI_DEFAULT_API_VERSION,
            headers=headers,
            **kwargs,
        )
        self._organization = organization
        mode = (api or OPENAI_DEFAULT_API).lower()
        if mode not in OPENAI_APIS:
            raise ValueError(f"api must be one of {OPENAI_APIS}, got {api!r}")
        self._api = mode

    @property
    def api(self) -> str:
        return self._api

    def auth_headers(self) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if self._organization:
            headers["OpenAI-Organization"] = self._organization
        return headers

    # ---- Request translation -------------------------------------------------
    def _part(self, part: ContentPart, *, model: str) -> Optional[wt.ContentPart]:
        if part.is_text:
            return wt.ContentPart(type="text", text=part.text)
        mime = (part.mime_type or "").lower()
        if mime.startswith("image/"):
            return wt.ContentPart(type="image_url", image_url=wt.ImageUrl(url=f"data:{mime};base64,{part.data}"))
        if mime in _AUDIO_FORMATS:
            return wt.ContentPart(
                type="input_audio",
                input_audio=wt.InputAudio(data=part.data, format=_AUDIO_FORMATS[mime]),
            )
        self.drop_param("content_part", f"unsupported inline mime type: {mime}", model=model)
        return None

    def _message(self, message: Message, *, model: str) -> wt.ChatMessage:
        if isinstance(message.content, str):
            return wt.ChatMessage(role=message.role, content=message.content)
        converted = [self._part(p, model=model) for p in message.content]
        parts = [p for p in converted if p is not None]
        content: Union[str, List[wt.ContentPart]] = parts
        if all(p.type == "text" for p in parts):
            # System and assistant turns accept plain strings everywhere.
            content = "\n".join(p.text or "" for p in parts)
        return wt.ChatMessage(role=message.role, content=content)

    def _stop(self, request: GenerationRequest) -> Optional[List[str]]:
        stop = list(request.stop_sequences)
        if len(stop) > OPENAI_MAX_STOP_SEQUENCES:
            self.drop_param(
                "stop_sequences",
                f"only {OPENAI_MAX_STOP_SEQUENCES} stop sequences accepted; {len(stop) - OPENAI_MAX_STOP_SEQUENCES} dropped",
                model=request.model,
            )
            stop = stop[:OPENAI_MAX_STOP_SEQUENCES]
        return stop or None

    def sampling_params(self, request: GenerationRequest, model: str) -> Tuple[Optional[float], Optional[float], Optional[str]]:
        """Return ``(temperature, top_p, reasoning_effort)`` accepted by ``model``."""
        reasoning = is_reasoning_model(model)
        temperature, top_p, effort = request.temperature, request.top_p, request.reasoning_effort
        if reasoning:
            if temperature is not None:
                self.drop_param("temperature", "not accepted by reasoning models", model=model)
                temperature = None
            if top_p is not None:
                self.drop_param("top_p", "not accepted by reasoning models", model=model)
                top_p = None
        elif effort is not None:
            self.drop_param("reasoning_effort", "only accepted by reasoning models", model=model)
            effort = None
        if request.top_k is not None:
            self.drop_param("top_k", "not supported by openai", model=model)
        if request.safety_settings:
            self.drop_param("safety_settings", "not supported by openai", model=model)
        return temperature, top_p, effort

    def to_wire(self, request: GenerationRequest, *, stream: bool = False) -> wt.ChatCompletionRequest:
        """Build the ``ChatCompletionRequest`` body for ``request``."""
        model = request.model or ""
        temperature, top_p, effort = self.sampling_params(request, model)
        response_format = (
            wt.ResponseFormat(type="json_object") if request.response_format == "json_object" else None
        )
        return wt.ChatCompletionRequest(
            model=model,
            messages=[self._message(m, model=model) for m in request.messages],
            temperature=temperature,
            top_p=top_p,
            max_completion_tokens=request.max_output_tokens,
            stop=self._stop(request),
            n=request.candidate_count,
            response_format=response_format,
            reasoning_effort=effort,
            stream=True if stream else None,
            stream_options=wt.StreamOptions(include_usage=True) if stream else None,
        )

    def build_generate_request(self, request: GenerationRequest, *, stream: bool = False) -> HttpRequest:
        request = self.resolve(request)
        if self._api == "responses":
            body = self.to_responses_wire(request, stream=stream).to_wire()
            path = "responses"
        else:
            body = self.to_wire(request, stream=stream).to_wire()
            path = "chat/completions"
        body.update(request.extra)
        return self.http_request("POST", path, json_body=body)

    # ---- Response translation ------------------------------------------------
    def detect_error(self, body: Any, status_code: Optional[int], *, model: Optional[str] = None) -> Optional[ProviderError]:
        if not isinstance(body, dict) or not isinstance(body.get("error"), dict):
            return None
        err = self.validate_error(wt.ErrorBody, body["error"], model=model, status_code=status_code)
        if err is None:
            return None
        provider_code = str(err.code) if err.code is not None else err.type
        status = status_code if status_code and status_code >= 400 else None
        code = code_for_provider_status(str(err.code) if err.code is not None else None)
        if code is ErrorCode.UNKNOWN:
            code = code_for_provider_status(err.type, status)
        return ProviderError(
            code=code,
            message=err.message or provider_code or "unknown openai error",
            provider=self.provider_name,
            model=model,
            retryable=is_retryable(code),
            raw=body,
            status_code=status,
            provider_code=provider_code,
            details={"type": err.type, "param": err.param} if (err.type or err.param) else None,
        )

    def from_wire(self, wire: Union[wt.ChatCompletion, wt.ResponseObject]) -> GenerationResponse:
        if isinstance(wire, wt.ResponseObject):
            return self.from_responses_wire(wire)
        candidates = [
            Candidate(
                index=c.index,
                text=c.message.content or "",
                finish_reason=map_finish_reason(c.finish_reason),
                refusal=c.message.refusal,
            )
            for c in sorted(wire.choices, key=lambda c: c.index)
        ]
        return GenerationResponse(
            candidates=candidates,
            usage=_usage(wire.usage),
            model=wire.model,
            response_id=wire.id,
            provider=self.provider_name,
        )

    def parse_generate_response(self, response: HttpResponse, *, model: Optional[str] = None) -> GenerationResponse:
        body = self.check_response(response, model=model)
        wire_cls = wt.ResponseObject if self._api == "responses" else wt.ChatCompletion
        return self.from_wire(self.validate(wire_cls, body, model=model, status_code=response.status_code))

    # ---- Streaming -----------------------------------------------------------
    def framer(self) -> Framer:
        return SseFramer()

    def parse_stream_frame(self, frame: bytes) -> FrameResult:
        if frame.strip() == DONE_SENTINEL:
            return END_OF_STREAM
        body = json.loads(frame)
        if self._api == "responses":
            return self.parse_responses_event(body)
        err = self.detect_error(body, None)
        if err is not None:
            raise err
        wire = wt.ChatCompletionChunk.model_validate(body)
        chunks = [
            StreamChunk(
                candidate_index=c.index,
                delta=c.delta.content or "",
                refusal=c.delta.refusal or None,
                finish_reason=map_finish_reason(c.finish_reason),
                model=wire.model,
                response_id=wire.id,
            )
            for c in wire.choices
        ]
        usage = _usage(wire.usage)
        if usage is not None:
            if chunks:
                chunks[-1].usage = usage
            else:
                chunks.append(StreamChunk(usage=usage, model=wire.model, response_id=wire.id))
        return chunks

    # ---- Models --------------------------------------------------------------
    def to_model_info(self, wire: wt.ModelObject) -> ModelInfo:
        return ModelInfo(id=wire.id, display_name=wire.id, provider=self.provider_name, owned_by=wire.owned_by)

    def build_list_models_request(self, page_token: Optional[str] = None) -> HttpRequest:
        return self.http_request("GET", "models", params={"after": page_token})

    def parse_list_models_response(self, response: HttpResponse) -> Tuple[List[ModelInfo], Optional[str]]:
        body = self.check_response(response)
        wire = self.validate(wt.ModelList, body, status_code=response.status_code)
        models = [self.to_model_info(m) for m in wire.data]
        # Some compatible gateways paginate with has_more/last_id.
        extra = wire.model_extra or {}
        next_token = extra.get("last_id") if extra.get("has_more") and models else None
        return models, next_token

    def build_get_model_request(self, model_id: str) -> HttpRequest:
        return self.http_request("GET", f"models/{model_id}")

    def parse_get_model_response(self, response: HttpResponse, *, model: Optional[str] = None) -> ModelInfo:
        body = self.check_response(response, model=model)
        return self.to_model_info(self.validate(wt.ModelObject, body, model=model, status_code=response.status_code))


__all__ = ["OpenAIAdapter", "DONE_SENTINEL", "is_reasoning_model", "map_finish_reason"]
