"""Structured logging context carried by client log events."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Provider/model/operation fields merged into every event payload.

    ``extra`` entries are flattened next to the named fields; ``None`` values
    are pruned so events only carry what is known.
    """

    provider: Optional[str] = None
    model: Optional[str] = None
    operation: Optional[str] = None
    response_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {
            "provider": self.provider,
            "model": self.model,
            "operation": self.operation,
            "response_id": self.response_id,
            **self.extra,
        }
        return {k: v for k, v in merged.items() if v is not None}


__all__ = ["LogContext"]
