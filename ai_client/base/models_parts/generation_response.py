"""
GenerationResponse DTO: the provider-agnostic result of a generate call.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .candidate import Candidate
from .usage import Usage


@dataclass
class GenerationResponse:
    """Normalized generation result.

    Attributes:
        candidates: Ordered candidates (at least one on success).
        usage: Token accounting when the provider reports it.
        model: Model that produced the response, as reported.
        response_id: Provider response identifier, when present.
        provider: Provider key of the adapter that parsed the response.
    """

    candidates: List[Candidate] = field(default_factory=list)
    usage: Optional[Usage] = None
    model: Optional[str] = None
    response_id: Optional[str] = None
    provider: Optional[str] = None

    @property
    def text(self) -> str:
        """Text of the first candidate, or an empty string."""
        return self.candidates[0].text if self.candidates else ""

    @property
    def finish_reason(self) -> Optional[str]:
        return self.candidates[0].finish_reason if self.candidates else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidates": [c.to_dict() for c in self.candidates],
            "usage": self.usage.to_dict() if self.usage else None,
            "model": self.model,
            "response_id": self.response_id,
            "provider": self.provider,
        }


__all__ = ["GenerationResponse"]
