"""
Error classification helpers mapping failures to normalized ErrorCode values.

Implements HTTP status extraction, status-to-code mapping, provider status
string mapping (Gemini ``google.rpc.Code`` names and OpenAI error types) and
message-based heuristics as a last resort.
"""
from __future__ import annotations

from typing import Dict, Optional

import httpx

from .client_error import ClientError
from .error_code import ErrorCode


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.VALIDATION,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

# Provider status / type strings, compared case-insensitively.
_PROVIDER_STATUS_MAP: Dict[str, ErrorCode] = {
    # google.rpc.Code names used in Gemini error envelopes
    "invalid_argument": ErrorCode.VALIDATION,
    "failed_precondition": ErrorCode.VALIDATION,
    "out_of_range": ErrorCode.VALIDATION,
    "unauthenticated": ErrorCode.AUTH,
    "permission_denied": ErrorCode.AUTH,
    "not_found": ErrorCode.NOT_FOUND,
    "already_exists": ErrorCode.CONFLICT,
    "aborted": ErrorCode.CONFLICT,
    "resource_exhausted": ErrorCode.RATE_LIMIT,
    "cancelled": ErrorCode.CANCELLED,
    "deadline_exceeded": ErrorCode.TIMEOUT,
    "unimplemented": ErrorCode.UNSUPPORTED,
    "internal": ErrorCode.SERVER_ERROR,
    "unavailable": ErrorCode.UNAVAILABLE,
    "data_loss": ErrorCode.SERVER_ERROR,
    # OpenAI error types and codes
    "invalid_request_error": ErrorCode.VALIDATION,
    "invalid_api_key": ErrorCode.AUTH,
    "authentication_error": ErrorCode.AUTH,
    "permission_error": ErrorCode.AUTH,
    "model_not_found": ErrorCode.NOT_FOUND,
    "not_found_error": ErrorCode.NOT_FOUND,
    "rate_limit_exceeded": ErrorCode.RATE_LIMIT,
    "insufficient_quota": ErrorCode.RATE_LIMIT,
    "tokens": ErrorCode.RATE_LIMIT,
    "requests": ErrorCode.RATE_LIMIT,
    "server_error": ErrorCode.SERVER_ERROR,
    "content_filter": ErrorCode.CONTENT_FILTER,
    "content_policy_violation": ErrorCode.CONTENT_FILTER,
}

RETRYABLE_CODES = frozenset(
    {
        ErrorCode.RATE_LIMIT,
        ErrorCode.TIMEOUT,
        ErrorCode.TRANSIENT,
        ErrorCode.UNAVAILABLE,
        ErrorCode.SERVER_ERROR,
    }
)


def code_for_status(status: Optional[int]) -> ErrorCode:
    """Map an HTTP status to an :class:`ErrorCode` (``UNKNOWN`` if unmapped)."""
    if status is None:
        return ErrorCode.UNKNOWN
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if 500 <= status < 600:
        return ErrorCode.SERVER_ERROR
    if 400 <= status < 500:
        return ErrorCode.VALIDATION
    return ErrorCode.UNKNOWN


def code_for_provider_status(provider_code: Optional[str], status: Optional[int] = None) -> ErrorCode:
    """Classify a provider error envelope.

    The provider's own status/type string wins; the HTTP status is the
    fallback when the string is absent or unknown.
    """
    if provider_code:
        mapped = _PROVIDER_STATUS_MAP.get(str(provider_code).strip().lower())
        if mapped is not None:
            return mapped
    return code_for_status(status)


def is_retryable(code: ErrorCode) -> bool:
    """Return whether ``code`` is usually worth retrying (a hint only)."""
    return code in RETRYABLE_CODES


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without structure."""
    PATTERN_GROUPS = (
        (ErrorCode.TIMEOUT, ("timeout", "timed out")),
        (ErrorCode.AUTH, ("api key", "unauthorized", "forbidden")),
        (ErrorCode.UNSUPPORTED, ("unsupported", "not supported")),
        (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
        (ErrorCode.UNAVAILABLE, ("unavailable", "connection refused")),
        (ErrorCode.VALIDATION, ("invalid", "malformed")),
    )
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, patterns in PATTERN_GROUPS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ClientError passthrough.
        2. Timeout exceptions (builtin and httpx).
        3. httpx transport failures.
        4. HTTP status mapping.
        5. Substring heuristics.
        6. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, ClientError):
        return exc.code
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc) if isinstance(exc, Exception) else None
    if status is not None:
        return code_for_status(status)
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
    "code_for_status",
    "code_for_provider_status",
    "is_retryable",
    "RETRYABLE_CODES",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
