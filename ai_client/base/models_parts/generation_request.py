"""
GenerationRequest DTO: the provider-agnostic input of a generate call.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Sequence

from .message import Message


ResponseFormat = Literal["text", "json_object"]


@dataclass
class GenerationRequest:
    """Normalized generation request.

    Attributes:
        model: Provider-scoped model identifier; ``None`` selects the client's
            default model.
        messages: Ordered, non-empty conversation.
        temperature: Sampling temperature.
        max_output_tokens: Upper bound on generated tokens.
        top_p: Nucleus sampling mass.
        top_k: Top-k sampling (Gemini only; dropped elsewhere).
        stop_sequences: Sequences that end generation.
        candidate_count: Number of alternative responses requested.
        response_format: ``"text"`` or ``"json_object"``.
        reasoning_effort: Effort hint for reasoning models (OpenAI only).
        safety_settings: Category to threshold mapping (Gemini only).
        extra: Provider-specific fields merged verbatim into the wire body.

    Raises:
        ValueError: When ``messages`` is empty or a numeric field is out of
            range.
    """

    messages: List[Message]
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    stop_sequences: Sequence[str] = field(default_factory=list)
    candidate_count: Optional[int] = None
    response_format: Optional[ResponseFormat] = None
    reasoning_effort: Optional[str] = None
    safety_settings: Dict[str, str] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.messages:
            raise ValueError("a generation request needs at least one message")
        if self.max_output_tokens is not None and self.max_output_tokens <= 0:
            raise ValueError("max_output_tokens must be positive")
        if self.candidate_count is not None and self.candidate_count <= 0:
            raise ValueError("candidate_count must be positive")
        if self.response_format not in (None, "text", "json_object"):
            raise ValueError(f"unknown response_format: {self.response_format!r}")
        self.stop_sequences = list(self.stop_sequences)

    def with_model(self, model: str) -> "GenerationRequest":
        """Return a copy bound to ``model``."""
        return replace(self, model=model)

    def system_messages(self) -> List[Message]:
        return [m for m in self.messages if m.role == "system"]

    def conversation(self) -> List[Message]:
        """Return the non-system messages in order."""
        return [m for m in self.messages if m.role != "system"]


__all__ = ["GenerationRequest", "ResponseFormat"]
