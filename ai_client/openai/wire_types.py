"""Pydantic models mirroring the OpenAI chat completions, responses and models
contract.

Only the fields the client reads or writes are declared; everything else is
preserved through ``extra="allow"``. Serialize requests with ``to_wire()``.
"""
from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class OpenAIWireModel(BaseModel):
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


# ---- Request side ----------------------------------------------------------


class ImageUrl(OpenAIWireModel):
    url: str
    detail: Optional[str] = None


class InputAudio(OpenAIWireModel):
    data: str
    format: Literal["wav", "mp3"]


class ContentPart(OpenAIWireModel):
    type: Literal["text", "image_url", "input_audio"]
    text: Optional[str] = None
    image_url: Optional[ImageUrl] = None
    input_audio: Optional[InputAudio] = None


class ChatMessage(OpenAIWireModel):
    role: Literal["system", "developer", "user", "assistant"]
    content: Union[str, List[ContentPart]]
    name: Optional[str] = None


class ResponseFormat(OpenAIWireModel):
    type: Literal["text", "json_object"]


class StreamOptions(OpenAIWireModel):
    include_usage: bool = True


class ChatCompletionRequest(OpenAIWireModel):
    model: str
    messages: List[ChatMessage]
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_completion_tokens: Optional[int] = None
    stop: Optional[List[str]] = None
    n: Optional[int] = None
    response_format: Optional[ResponseFormat] = None
    reasoning_effort: Optional[str] = None
    stream: Optional[bool] = None
    stream_options: Optional[StreamOptions] = None


# ---- Response side ---------------------------------------------------------


class ResponseMessage(OpenAIWireModel):
    role: Optional[str] = None
    content: Optional[str] = None
    refusal: Optional[str] = None


class Choice(OpenAIWireModel):
    index: int = 0
    message: ResponseMessage
    finish_reason: Optional[str] = None


class CompletionUsage(OpenAIWireModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ChatCompletion(OpenAIWireModel):
    id: Optional[str] = None
    object: Optional[str] = None
    created: Optional[int] = None
    model: Optional[str] = None
    choices: List[Choice]
    usage: Optional[CompletionUsage] = None


class ChunkDelta(OpenAIWireModel):
    role: Optional[str] = None
    content: Optional[str] = None
    refusal: Optional[str] = None


class ChunkChoice(OpenAIWireModel):
    index: int = 0
    delta: ChunkDelta = Field(default_factory=ChunkDelta)
    finish_reason: Optional[str] = None


class ChatCompletionChunk(OpenAIWireModel):
    id: Optional[str] = None
    object: Optional[str] = None
    model: Optional[str] = None
    choices: List[ChunkChoice] = Field(default_factory=list)
    usage: Optional[CompletionUsage] = None


class ModelObject(OpenAIWireModel):
    id: str
    object: Optional[str] = None
    created: Optional[int] = None
    owned_by: Optional[str] = None


class ModelList(OpenAIWireModel):
    object: Optional[str] = None
    data: List[ModelObject]


class ErrorBody(OpenAIWireModel):
    message: str = ""
    type: Optional[str] = None
    param: Optional[str] = None
    code: Optional[Union[str, int]] = None


# ---- Responses API (/v1/responses) -------------------------------------------


class ResponsesInputPart(OpenAIWireModel):
    type: Literal["input_text", "input_image"]
    text: Optional[str] = None
    image_url: Optional[str] = None
    detail: Optional[str] = None


class ResponsesInputItem(OpenAIWireModel):
    role: Literal["system", "developer", "user", "assistant"]
    content: Union[str, List[ResponsesInputPart]]


class ResponsesTextFormat(OpenAIWireModel):
    type: Literal["text", "json_object"]


class ResponsesTextConfig(OpenAIWireModel):
    format: Optional[ResponsesTextFormat] = None


class ResponsesReasoning(OpenAIWireModel):
    effort: Optional[str] = None


class ResponsesCreateRequest(OpenAIWireModel):
    model: str
    input: Union[str, List[ResponsesInputItem]]
    instructions: Optional[str] = None
    max_output_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    stream: Optional[bool] = None
    text: Optional[ResponsesTextConfig] = None
    reasoning: Optional[ResponsesReasoning] = None


class ResponseContentPart(OpenAIWireModel):
    """``output_text`` and ``refusal`` parts; other part types are kept opaque."""

    type: str
    text: Optional[str] = None
    refusal: Optional[str] = None


class ResponseOutputItem(OpenAIWireModel):
    type: str
    id: Optional[str] = None
    status: Optional[str] = None
    role: Optional[str] = None
    content: List[ResponseContentPart] = Field(default_factory=list)


class ResponseUsage(OpenAIWireModel):
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class IncompleteDetails(OpenAIWireModel):
    reason: Optional[str] = None


class ResponseObject(OpenAIWireModel):
    id: Optional[str] = None
    object: Optional[str] = None
    created_at: Optional[int] = None
    status: Optional[str] = None
    model: Optional[str] = None
    error: Optional[ErrorBody] = None
    incomplete_details: Optional[IncompleteDetails] = None
    output: List[ResponseOutputItem] = Field(default_factory=list)
    usage: Optional[ResponseUsage] = None


class ResponsesStreamEvent(OpenAIWireModel):
    """One Server-Sent Event of a streamed response, discriminated by ``type``."""

    type: str
    sequence_number: Optional[int] = None
    output_index: Optional[int] = None
    content_index: Optional[int] = None
    item_id: Optional[str] = None
    delta: Optional[str] = None
    response: Optional[ResponseObject] = None


__all__ = [
    "ImageUrl",
    "InputAudio",
    "ContentPart",
    "ChatMessage",
    "ResponseFormat",
    "StreamOptions",
    "ChatCompletionRequest",
    "ResponseMessage",
    "Choice",
    "CompletionUsage",
    "ChatCompletion",
    "ChunkDelta",
    "ChunkChoice",
    "ChatCompletionChunk",
    "ModelObject",
    "ModelList",
    "ErrorBody",
    "ResponsesInputPart",
    "ResponsesInputItem",
    "ResponsesTextFormat",
    "ResponsesTextConfig",
    "ResponsesReasoning",
    "ResponsesCreateRequest",
    "ResponseContentPart",
    "ResponseOutputItem",
    "ResponseUsage",
    "IncompleteDetails",
    "ResponseObject",
    "ResponsesStreamEvent",
]
