"""
Provider-agnostic domain models public surface.

This module re-exports the one-class-per-file implementations under
``ai_client.base.models_parts`` so callers have one stable import path.
"""

from .models_parts.content_part import ContentPart, ContentPartType
from .models_parts.message import Message, Role, ROLES
from .models_parts.generation_request import GenerationRequest, ResponseFormat
from .models_parts.usage import Usage
from .models_parts.candidate import Candidate, FinishReason
from .models_parts.generation_response import GenerationResponse
from .models_parts.stream_chunk import StreamChunk
from .models_parts.model_info import ModelInfo
from .models_parts.token_count import TokenCount

__all__ = [
    "ContentPart",
    "ContentPartType",
    "Message",
    "Role",
    "ROLES",
    "GenerationRequest",
    "ResponseFormat",
    "Usage",
    "Candidate",
    "FinishReason",
    "GenerationResponse",
    "StreamChunk",
    "ModelInfo",
    "TokenCount",
]
