"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `ai_client.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .client_error import (
    ClientError,
    ConfigurationError,
    ProtocolError,
    ProviderError,
    StreamDecodeError,
    TransportError,
    UnsupportedOperation,
    excerpt,
)
from .classification import (
    classify_exception,
    code_for_provider_status,
    code_for_status,
    is_retryable,
)

__all__ = [
    "ErrorCode",
    "ClientError",
    "ConfigurationError",
    "ProtocolError",
    "ProviderError",
    "StreamDecodeError",
    "TransportError",
    "UnsupportedOperation",
    "excerpt",
    "classify_exception",
    "code_for_provider_status",
    "code_for_status",
    "is_retryable",
]
