"""
Client Base Package

Exports provider-agnostic contracts for the adapters and the client facade:

- Models: unified request/response values (``GenerationRequest``, ``StreamChunk``, ...)
- Errors: ``ClientError`` hierarchy and the normalized ``ErrorCode``
- Adapter: ``BaseAdapter`` translation contract
- HTTP: ``Transport`` protocol and the ``HttpxTransport`` implementation
- Streaming: framers, ``StreamDecoder`` and ``ChunkStream``
- Factory: lazy creation of provider adapters and clients by canonical name
"""

from .adapter import BaseAdapter
from .dto import ClientParams
from .errors import (
    ClientError,
    ConfigurationError,
    ErrorCode,
    ProtocolError,
    ProviderError,
    StreamDecodeError,
    TransportError,
    UnsupportedOperation,
)
from .factory import ProviderFactory, UnknownProviderError, create_adapter, create_client
from .http import ByteStream, HttpRequest, HttpResponse, HttpxTransport, Transport
from .models import (
    Candidate,
    ContentPart,
    GenerationRequest,
    GenerationResponse,
    Message,
    ModelInfo,
    Role,
    StreamChunk,
    TokenCount,
    Usage,
)
from .streaming import ChunkStream, DecoderState, StreamDecoder, StreamMetrics, accumulate_chunks
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    # Models
    "Role",
    "ContentPart",
    "Message",
    "GenerationRequest",
    "GenerationResponse",
    "Candidate",
    "Usage",
    "StreamChunk",
    "ModelInfo",
    "TokenCount",
    # Errors
    "ErrorCode",
    "ClientError",
    "ConfigurationError",
    "ProtocolError",
    "ProviderError",
    "StreamDecodeError",
    "TransportError",
    "UnsupportedOperation",
    # Adapter & DTOs
    "BaseAdapter",
    "ClientParams",
    # HTTP
    "Transport",
    "ByteStream",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    # Streaming
    "ChunkStream",
    "DecoderState",
    "StreamDecoder",
    "StreamMetrics",
    "accumulate_chunks",
    # Factory
    "ProviderFactory",
    "UnknownProviderError",
    "create_adapter",
    "create_client",
    # Timeouts
    "TimeoutConfig",
    "get_timeout_config",
]
