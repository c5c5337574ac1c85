"""Pydantic models mirroring the Gemini Generative Language REST contract.

Field names are snake_case in Python and camelCase on the wire through an
alias generator; serialize with ``to_wire()``. Unknown response fields are
kept (``extra="allow"``) so newer API revisions validate.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GeminiWireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        protected_namespaces=(),
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HarmCategory(str, Enum):
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"
    CIVIC_INTEGRITY = "HARM_CATEGORY_CIVIC_INTEGRITY"


class HarmBlockThreshold(str, Enum):
    UNSPECIFIED = "HARM_BLOCK_THRESHOLD_UNSPECIFIED"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_NONE = "BLOCK_NONE"
    OFF = "OFF"


# ---- Request side ----------------------------------------------------------


class InlineData(GeminiWireModel):
    mime_type: str
    data: str


class Part(GeminiWireModel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None
    # Set on "thinking" parts of 2.5 models; their text is not answer text.
    thought: Optional[bool] = None


class Content(GeminiWireModel):
    role: Optional[str] = None
    parts: List[Part] = Field(default_factory=list)


class GenerationConfig(GeminiWireModel):
    stop_sequences: Optional[List[str]] = None
    candidate_count: Optional[int] = None
    max_output_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    response_mime_type: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.to_wire()


class SafetySetting(GeminiWireModel):
    category: HarmCategory
    threshold: HarmBlockThreshold


class GenerateContentRequest(GeminiWireModel):
    # Only set when nested inside a countTokens request.
    model: Optional[str] = None
    contents: List[Content]
    system_instruction: Optional[Content] = None
    generation_config: Optional[GenerationConfig] = None
    safety_settings: Optional[List[SafetySetting]] = None


class CountTokensRequest(GeminiWireModel):
    generate_content_request: GenerateContentRequest


# ---- Response side ---------------------------------------------------------


class Candidate(GeminiWireModel):
    content: Optional[Content] = None
    finish_reason: Optional[str] = None
    index: Optional[int] = None
    safety_ratings: Optional[List[Any]] = None

    def text(self) -> str:
        if self.content is None:
            return ""
        return "".join(p.text for p in self.content.parts if p.text and not p.thought)


class UsageMetadata(GeminiWireModel):
    prompt_token_count: Optional[int] = None
    candidates_token_count: Optional[int] = None
    total_token_count: Optional[int] = None
    thoughts_token_count: Optional[int] = None


class PromptFeedback(GeminiWireModel):
    block_reason: Optional[str] = None
    safety_ratings: Optional[List[Any]] = None


class GenerateContentResponse(GeminiWireModel):
    candidates: List[Candidate] = Field(default_factory=list)
    usage_metadata: Optional[UsageMetadata] = None
    prompt_feedback: Optional[PromptFeedback] = None
    model_version: Optional[str] = None
    response_id: Optional[str] = None

    @property
    def blocked(self) -> bool:
        return not self.candidates and bool(self.prompt_feedback and self.prompt_feedback.block_reason)


class CountTokensResponse(GeminiWireModel):
    # proto3 JSON omits zero values.
    total_tokens: int = 0


class Model(GeminiWireModel):
    name: str
    base_model_id: Optional[str] = None
    version: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    input_token_limit: Optional[int] = None
    output_token_limit: Optional[int] = None
    supported_generation_methods: List[str] = Field(default_factory=list)
    temperature: Optional[float] = None
    max_temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None


class ListModelsResponse(GeminiWireModel):
    models: List[Model] = Field(default_factory=list)
    next_page_token: Optional[str] = None


class ErrorDetail(GeminiWireModel):
    code: Optional[Union[int, str]] = None
    message: str = ""
    status: Optional[str] = None
    details: Optional[List[Any]] = None


__all__ = [
    "HarmCategory",
    "HarmBlockThreshold",
    "InlineData",
    "Part",
    "Content",
    "GenerationConfig",
    "SafetySetting",
    "GenerateContentRequest",
    "CountTokensRequest",
    "Candidate",
    "UsageMetadata",
    "PromptFeedback",
    "GenerateContentResponse",
    "CountTokensResponse",
    "Model",
    "ListModelsResponse",
    "ErrorDetail",
]
