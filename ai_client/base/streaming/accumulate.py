"""Fold a chunk sequence into a single :class:`GenerationResponse`."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..models import Candidate, FinishReason, GenerationResponse, StreamChunk, Usage


def accumulate_chunks(chunks: Iterable[StreamChunk], *, provider: Optional[str] = None) -> GenerationResponse:
    """Concatenate deltas (and refusal fragments) per candidate index.

    Candidates are ordered by index; the last finish reason, usage, model
    and response id seen win.
    """
    texts: Dict[int, List[str]] = {}
    refusals: Dict[int, List[str]] = {}
    finish: Dict[int, Optional[FinishReason]] = {}
    usage: Optional[Usage] = None
    model: Optional[str] = None
    response_id: Optional[str] = None
    for chunk in chunks:
        texts.setdefault(chunk.candidate_index, [])
        if chunk.delta:
            texts[chunk.candidate_index].append(chunk.delta)
        if chunk.refusal:
            refusals.setdefault(chunk.candidate_index, []).append(chunk.refusal)
        if chunk.finish_reason is not None:
            finish[chunk.candidate_index] = chunk.finish_reason
        usage = chunk.usage or usage
        model = chunk.model or model
        response_id = chunk.response_id or response_id
    candidates = [
        Candidate(
            index=idx,
            text="".join(parts),
            finish_reason=finish.get(idx),
            refusal="".join(refusals[idx]) if idx in refusals else None,
        )
        for idx, parts in sorted(texts.items())
    ]
    return GenerationResponse(
        candidates=candidates,
        usage=usage,
        model=model,
        response_id=response_id,
        provider=provider,
    )


__all__ = ["accumulate_chunks"]
