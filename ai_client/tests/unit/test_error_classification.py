"""Error taxonomy and classification tests.

Covers:
- HTTP status mapping including the generic 4xx/5xx fallbacks
- provider status strings (Gemini rpc names, OpenAI types/codes) win over
  the HTTP status
- ``classify_exception`` precedence for client, httpx and plain errors
- retryable hints and bounded excerpts
"""
from __future__ import annotations

import httpx
import pytest

from ai_client.base.errors import (
    ClientError,
    ErrorCode,
    ProviderError,
    TransportError,
    classify_exception,
    code_for_provider_status,
    code_for_status,
    excerpt,
    is_retryable,
)


@pytest.mark.parametrize(
    "status,expected",
    [
        (400, ErrorCode.VALIDATION),
        (401, ErrorCode.AUTH),
        (403, ErrorCode.AUTH),
        (404, ErrorCode.NOT_FOUND),
        (418, ErrorCode.VALIDATION),
        (429, ErrorCode.RATE_LIMIT),
        (500, ErrorCode.SERVER_ERROR),
        (503, ErrorCode.UNAVAILABLE),
        (504, ErrorCode.TIMEOUT),
        (599, ErrorCode.SERVER_ERROR),
        (302, ErrorCode.UNKNOWN),
        (None, ErrorCode.UNKNOWN),
    ],
)
def test_code_for_status(status, expected):
    assert code_for_status(status) is expected


@pytest.mark.parametrize(
    "provider_code,status,expected",
    [
        ("RESOURCE_EXHAUSTED", 429, ErrorCode.RATE_LIMIT),
        ("INVALID_ARGUMENT", 400, ErrorCode.VALIDATION),
        ("PERMISSION_DENIED", 403, ErrorCode.AUTH),
        ("insufficient_quota", 429, ErrorCode.RATE_LIMIT),
        ("invalid_api_key", 401, ErrorCode.AUTH),
        ("model_not_found", 404, ErrorCode.NOT_FOUND),
        # The envelope wins even when the status disagrees.
        ("RESOURCE_EXHAUSTED", 200, ErrorCode.RATE_LIMIT),
        ("something_new", 503, ErrorCode.UNAVAILABLE),
        (None, 401, ErrorCode.AUTH),
        (None, None, ErrorCode.UNKNOWN),
    ],
)
def test_code_for_provider_status(provider_code, status, expected):
    assert code_for_provider_status(provider_code, status) is expected


def test_classify_client_error_passthrough():
    err = ProviderError(code=ErrorCode.CONTENT_FILTER, message="blocked", provider="gemini")
    assert classify_exception(err) is ErrorCode.CONTENT_FILTER


def test_classify_httpx_failures():
    req = httpx.Request("GET", "https://example.invalid")
    assert classify_exception(httpx.ReadTimeout("slow", request=req)) is ErrorCode.TIMEOUT
    assert classify_exception(httpx.ConnectError("refused", request=req)) is ErrorCode.TRANSIENT
    assert classify_exception(TimeoutError()) is ErrorCode.TIMEOUT


def test_classify_status_attribute_and_heuristics():
    class _WithStatus(Exception):
        status_code = 429

    assert classify_exception(_WithStatus()) is ErrorCode.RATE_LIMIT
    assert classify_exception(RuntimeError("model does not exist")) is ErrorCode.NOT_FOUND
    assert classify_exception(RuntimeError("rate limit hit")) is ErrorCode.RATE_LIMIT
    assert classify_exception(RuntimeError("???")) is ErrorCode.UNKNOWN


def test_retryable_hints():
    assert is_retryable(ErrorCode.RATE_LIMIT)
    assert is_retryable(ErrorCode.UNAVAILABLE)
    assert not is_retryable(ErrorCode.AUTH)
    assert not is_retryable(ErrorCode.CONTENT_FILTER)


def test_error_hierarchy_and_str():
    err = TransportError(code=ErrorCode.TRANSIENT, message="reset", provider="openai", model="gpt")
    assert isinstance(err, ClientError)
    assert isinstance(err, Exception)
    assert "transient" in str(err) and "reset" in str(err)
    perr = ProviderError(code=ErrorCode.AUTH, message="bad key", provider="openai", status_code=401)
    assert "[401]" in str(perr)


def test_excerpt_is_bounded():
    assert excerpt(b"abc") == "abc"
    long = excerpt("x" * 2000, limit=10)
    assert long == "x" * 10 + "..."
    assert excerpt(b"\xff\xfe") != ""
