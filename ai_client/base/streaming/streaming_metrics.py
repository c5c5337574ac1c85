"""Streaming metrics data structures."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..models import Usage


@dataclass
class StreamMetrics:
    """Metrics collected for a single streamed generation.

    Attributes:
        emitted: Number of chunks handed to the caller.
        frames: Number of frames decoded.
        time_to_first_chunk_ms: Latency from stream open to the first chunk.
        total_duration_ms: Latency from stream open to termination.
        prompt_tokens / completion_tokens / total_tokens: Usage as reported on
            the terminal chunk, when the provider sends it.
    """

    emitted: int = 0
    frames: int = 0
    time_to_first_chunk_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_token_usage(prompt: Optional[int], completion: Optional[int], total: Optional[int] = None) -> Dict[str, Optional[int]]:
    """Return a canonical token usage mapping."""
    derived_total = total
    if derived_total is None and (prompt is not None and completion is not None):
        derived_total = prompt + completion
    return {"prompt": prompt, "completion": completion, "total": derived_total}


def apply_token_usage(metrics: StreamMetrics, usage: Optional[Usage]) -> None:
    """Copy ``usage`` onto ``metrics`` (no-op for ``None``)."""
    if usage is None:
        return
    tokens = build_token_usage(usage.prompt_tokens, usage.completion_tokens, usage.total_tokens)
    metrics.prompt_tokens = tokens["prompt"]
    metrics.completion_tokens = tokens["completion"]
    metrics.total_tokens = tokens["total"]


def token_usage_of(metrics: StreamMetrics) -> Optional[Dict[str, Optional[int]]]:
    """Return the usage mapping for log events, or ``None`` when unknown."""
    if metrics.prompt_tokens is None and metrics.completion_tokens is None and metrics.total_tokens is None:
        return None
    return build_token_usage(metrics.prompt_tokens, metrics.completion_tokens, metrics.total_tokens)


__all__ = [
    "StreamMetrics",
    "apply_token_usage",
    "build_token_usage",
    "token_usage_of",
]
