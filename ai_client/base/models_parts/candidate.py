"""
Candidate DTO and the normalized finish reason set.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Optional


FinishReason = Literal["stop", "length", "content_filter", "error", "unknown"]


@dataclass
class Candidate:
    """One alternative completion within a response.

    Attributes:
        index: Position of the candidate as reported by the provider.
        text: Concatenated text output.
        finish_reason: Normalized reason generation ended.
        refusal: Refusal text when the model declined (OpenAI).
    """

    index: int
    text: str
    finish_reason: Optional[FinishReason] = None
    refusal: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["Candidate", "FinishReason"]
