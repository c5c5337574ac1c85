"""
ModelInfo DTO describing a model offered by a provider.

Capability flags are tri-state: ``None`` means the provider did not say.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass
class ModelInfo:
    """Provider-agnostic model descriptor.

    Attributes:
        id: Identifier accepted by ``GenerationRequest.model``.
        display_name: Human-friendly name.
        provider: Provider key (``"gemini"`` or ``"openai"``).
        context_window: Maximum input tokens, when reported.
        output_token_limit: Maximum output tokens, when reported.
        supports_streaming: Whether streamed generation is offered.
        supports_multi_turn: Whether multi-turn conversations are accepted.
        supports_vision: Whether image input is accepted.
        description: Free-form provider description.
        owned_by: Owning organization, when reported.
    """

    id: str
    display_name: Optional[str] = None
    provider: Optional[str] = None
    context_window: Optional[int] = None
    output_token_limit: Optional[int] = None
    supports_streaming: Optional[bool] = None
    supports_multi_turn: Optional[bool] = None
    supports_vision: Optional[bool] = None
    description: Optional[str] = None
    owned_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ModelInfo"]
