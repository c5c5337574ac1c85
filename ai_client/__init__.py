"""ai_client package

Unified client for Gemini-style and OpenAI-style generative model APIs.

Purpose:
    One request/response model, one streaming iterator and one error
    taxonomy over both providers. Callers build a client by provider name
    (``create_client("gemini")``) and use the same methods everywhere.

Public API (re-exported):
    - Version: ``__version__``
    - Client: :class:`AIClient`, :func:`create_client`
    - Models: :class:`GenerationRequest`, :class:`Message`, :class:`ContentPart`,
      :class:`GenerationResponse`, :class:`StreamChunk`, :class:`ModelInfo`
    - Exceptions: :class:`ClientError` and subclasses, :class:`ErrorCode`

Example:
    >>> from ai_client import create_client, GenerationRequest, Message  # doctest: +SKIP
    >>> client = create_client("gemini")  # doctest: +SKIP
    >>> client.generate(GenerationRequest(messages=[Message("user", "2+2?")])).text  # doctest: +SKIP
    '4'
"""

from .base.errors import (
    ClientError,
    ConfigurationError,
    ErrorCode,
    ProtocolError,
    ProviderError,
    StreamDecodeError,
    TransportError,
    UnsupportedOperation,
)
from .base.factory import ProviderFactory, UnknownProviderError, create_client
from .base.dto import ClientParams
from .base.models import (
    Candidate,
    ContentPart,
    GenerationRequest,
    GenerationResponse,
    Message,
    ModelInfo,
    StreamChunk,
    TokenCount,
    Usage,
)
from .base.streaming import ChunkStream, accumulate_chunks
from .client import AIClient

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Client
    "AIClient",
    "ChunkStream",
    "ClientParams",
    "ProviderFactory",
    "UnknownProviderError",
    "create_client",
    "accumulate_chunks",
    # Models
    "Candidate",
    "ContentPart",
    "GenerationRequest",
    "GenerationResponse",
    "Message",
    "ModelInfo",
    "StreamChunk",
    "TokenCount",
    "Usage",
    # Exceptions
    "ErrorCode",
    "ClientError",
    "ConfigurationError",
    "ProtocolError",
    "ProviderError",
    "StreamDecodeError",
    "TransportError",
    "UnsupportedOperation",
]
