"""TokenCount DTO returned by count-tokens operations."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class TokenCount:
    total_tokens: int
    model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["TokenCount"]
