"""Unified model parts package (one class per file)."""

from .content_part import ContentPart, ContentPartType
from .message import Message, Role, ROLES
from .generation_request import GenerationRequest, ResponseFormat
from .usage import Usage
from .candidate import Candidate, FinishReason
from .generation_response import GenerationResponse
from .stream_chunk import StreamChunk
from .model_info import ModelInfo
from .token_count import TokenCount

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
