"""OpenAI Responses API translation (``POST /v1/responses``).

Mixed into :class:`~ai_client.openai.adapter.OpenAIAdapter` and used when the
adapter is created with ``api="responses"``.

Mapping notes:
    - System messages are joined into ``instructions``; the remaining turns
      become ``input`` items with ``input_text`` / ``input_image`` parts.
    - ``response_format="json_object"`` becomes ``text.format``;
      ``reasoning_effort`` becomes ``reasoning.effort``.
    - ``stop_sequences``, ``candidate_count`` and audio parts have no
      equivalent and are dropped (logged as ``request.param_dropped``).
    - A response always holds a single candidate. ``status`` maps to the
      finish reason: ``completed`` is ``stop``; ``incomplete`` maps through
      ``incomplete_details.reason``.

Streams are Server-Sent Events without a ``[DONE]`` sentinel; the stream
ends with ``response.completed`` (or ``response.incomplete``) followed by
end of input. ``error`` and ``response.failed`` events raise
``ProviderError``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from ..base.errors import ErrorCode, ProviderError
from ..base.models import (
    Candidate,
    ContentPart,
    FinishReason,
    GenerationRequest,
    GenerationResponse,
    Message,
    StreamChunk,
    Usage,
)
from . import wire_types as wt

_INCOMPLETE_REASONS: Dict[str, FinishReason] = {
    "max_output_tokens": "length",
    "content_filter": "content_filter",
}


def map_response_status(status: Optional[str], incomplete: Optional[wt.IncompleteDetails] = None) -> Optional[FinishReason]:
    if not status or status in ("in_progress", "queued"):
        return None
    if status == "completed":
        return "stop"
    if status == "incomplete":
        reason = incomplete.reason if incomplete else None
        return _INCOMPLETE_REASONS.get(reason or "", "unknown")
    if status in ("failed", "cancelled"):
        return "error"
    return "unknown"


def _response_usage(usage: Optional[wt.ResponseUsage]) -> Optional[Usage]:
    if usage is None:
        return None
    return Usage(
        prompt_tokens=usage.input_tokens,
        completion_tokens=usage.output_tokens,
        total_tokens=usage.total_tokens,
    )


class ResponsesApiMixin:
    """Request/response translation for the Responses API.

    Relies on ``drop_param``, ``sampling_params``, ``detect_error`` and
    ``provider_name`` from the adapter it is mixed into.
    """

    # ---- Request translation -------------------------------------------------
    def _responses_part(self, part: ContentPart, *, model: str) -> Optional[wt.ResponsesInputPart]:
        if part.is_text:
            return wt.ResponsesInputPart(type="input_text", text=part.text)
        mime = (part.mime_type or "").lower()
        if mime.startswith("image/"):
            return wt.ResponsesInputPart(type="input_image", image_url=f"data:{mime};base64,{part.data}")
        self.drop_param("content_part", f"unsupported inline mime type for responses: {mime}", model=model)
        return None

    def _responses_item(self, message: Message, *, model: str) -> wt.ResponsesInputItem:
        if isinstance(message.content, str):
            return wt.ResponsesInputItem(role=message.role, content=message.content)
        parts = [p for p in (self._responses_part(c, model=model) for c in message.content) if p is not None]
        content: Union[str, List[wt.ResponsesInputPart]] = parts
        if all(p.type == "input_text" for p in parts):
            content = "\n".join(p.text or "" for p in parts)
        return wt.ResponsesInputItem(role=message.role, content=content)

    def to_responses_wire(self, request: GenerationRequest, *, stream: bool = False) -> wt.ResponsesCreateRequest:
        """Build the ``/v1/responses`` body for ``request``."""
        model = request.model or ""
        temperature, top_p, effort = self.sampling_params(request, model)
        if request.stop_sequences:
            self.drop_param("stop_sequences", "not supported by the responses api", model=model)
        if request.candidate_count not in (None, 1):
            self.drop_param("candidate_count", "the responses api returns a single candidate", model=model)
        system = request.system_messages()
        instructions = "\n".join(m.text_or_joined() for m in system) if system else None
        text_config = (
            wt.ResponsesTextConfig(format=wt.ResponsesTextFormat(type="json_object"))
            if request.response_format == "json_object"
            else None
        )
        return wt.ResponsesCreateRequest(
            model=model,
            input=[self._responses_item(m, model=model) for m in request.conversation()],
            instructions=instructions,
            max_output_tokens=request.max_output_tokens,
            temperature=temperature,
            top_p=top_p,
            stream=True if stream else None,
            text=text_config,
            reasoning=wt.ResponsesReasoning(effort=effort) if effort is not None else None,
        )

    # ---- Response translation ------------------------------------------------
    def from_responses_wire(self, wire: wt.ResponseObject) -> GenerationResponse:
        texts: List[str] = []
        refusals: List[str] = []
        for item in wire.output:
            if item.type != "message":
                continue
            for part in item.content:
                if part.type == "output_text" and part.text:
                    texts.append(part.text)
                elif part.type == "refusal" and part.refusal:
                    refusals.append(part.refusal)
        candidate = Candidate(
            index=0,
            text="".join(texts),
            finish_reason=map_response_status(wire.status, wire.incomplete_details),
            refusal="".join(refusals) or None,
        )
        return GenerationResponse(
            candidates=[candidate],
            usage=_response_usage(wire.usage),
            model=wire.model,
            response_id=wire.id,
            provider=self.provider_name,
        )

    # ---- Streaming -----------------------------------------------------------
    def _event_error(self, body: Dict[str, Any], event: wt.ResponsesStreamEvent) -> ProviderError:
        if event.type == "response.failed":
            failed = event.response.error if event.response else None
            payload: Any = failed.model_dump(exclude_none=True) if failed else {"message": "response failed"}
        elif isinstance(body.get("error"), dict):
            payload = body["error"]
        else:
            payload = {k: body[k] for k in ("message", "code", "param") if body.get(k) is not None}
        err = self.detect_error({"error": payload}, None)
        if err is None:
            return ProviderError(code=ErrorCode.UNKNOWN, message="stream error event", provider=self.provider_name)
        return err

    def parse_responses_event(self, body: Dict[str, Any]) -> List[StreamChunk]:
        """Translate one decoded stream event into chunks (possibly none)."""
        event = wt.ResponsesStreamEvent.model_validate(body)
        if event.type in ("error", "response.failed"):
            raise self._event_error(body, event)
        if event.type == "response.output_text.delta":
            return [StreamChunk(delta=event.delta or "")]
        if event.type == "response.refusal.delta":
            return [StreamChunk(refusal=event.delta or None)]
        if event.type in ("response.completed", "response.incomplete"):
            response = event.response
            if response is None:
                raise ValueError(f"{event.type} event without a response object")
            return [
                StreamChunk(
                    finish_reason=map_response_status(response.status, response.incomplete_details),
                    usage=_response_usage(response.usage),
                    model=response.model,
                    response_id=response.id,
                )
            ]
        # Lifecycle events (created, output_item.*, content_part.*, *.done) carry nothing new.
        return []


__all__ = ["ResponsesApiMixin", "map_response_status"]
