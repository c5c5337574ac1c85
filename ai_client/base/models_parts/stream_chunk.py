"""
StreamChunk DTO emitted by the streaming decoder.

A chunk carries one candidate's incremental text, plus incremental refusal
text where the provider streams one. Chunks carrying only
metadata (finish reason, usage) have an empty ``delta``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .candidate import FinishReason
from .usage import Usage


@dataclass
class StreamChunk:
    candidate_index: int = 0
    delta: str = ""
    finish_reason: Optional[FinishReason] = None
    usage: Optional[Usage] = None
    model: Optional[str] = None
    response_id: Optional[str] = None
    refusal: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate_index": self.candidate_index,
            "delta": self.delta,
            "finish_reason": self.finish_reason,
            "usage": self.usage.to_dict() if self.usage else None,
            "model": self.model,
            "response_id": self.response_id,
            "refusal": self.refusal,
        }


__all__ = ["StreamChunk"]
