"""Unified client error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``ai_client.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.client_error import (
    ClientError,
    ConfigurationError,
    ProtocolError,
    ProviderError,
    StreamDecodeError,
    TransportError,
    UnsupportedOperation,
    excerpt,
)
from .errors_parts.classification import (
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
