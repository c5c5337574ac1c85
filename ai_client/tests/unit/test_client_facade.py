"""AIClient facade tests with in-memory transports.

Covers:
- the ``2+2?`` generate example against both providers
- default model substitution and explicit model precedence
- streamed generation end to end, including error statuses at open time
- capability checks fail before any request is sent
- pagination is followed for list_models and stops on repeated tokens
- start/end/error lifecycle events
"""
from __future__ import annotations

import json

import pytest

from ai_client import AIClient, GenerationRequest, Message
from ai_client.base.errors import (
    ConfigurationError,
    ErrorCode,
    ProtocolError,
    ProviderError,
    StreamDecodeError,
    UnsupportedOperation,
)
from ai_client.base.http import HttpResponse
from ai_client.base.streaming import DecoderState
from ai_client.gemini import GeminiAdapter
from ai_client.openai import OpenAIAdapter

GEMINI_OK = {
    "candidates": [
        {"content": {"role": "model", "parts": [{"text": "4"}]}, "finishReason": "STOP", "index": 0}
    ],
    "usageMetadata": {"promptTokenCount": 4, "candidatesTokenCount": 1, "totalTokenCount": 5},
    "modelVersion": "gemini-2.5-pro",
    "responseId": "resp-1",
}

OPENAI_OK = {
    "id": "chatcmpl-1",
    "object": "chat.completion",
    "model": "gpt-4o-mini",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "4"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 9, "completion_tokens": 1, "total_tokens": 10},
}


def _request(**kwargs) -> GenerationRequest:
    return GenerationRequest(messages=[Message("user", "2+2?")], **kwargs)


def _gemini(transport, model="gemini-2.5-pro") -> AIClient:
    return AIClient(GeminiAdapter(api_key="g-key", model=model), transport)


def _openai(transport, model="gpt-4o-mini") -> AIClient:
    return AIClient(OpenAIAdapter(api_key="o-key", model=model), transport)


def test_generate_gemini_two_plus_two(fake_transport, log_capture):
    fake_transport.queue_json(GEMINI_OK)
    resp = _gemini(fake_transport).generate(_request())
    assert resp.text == "4"
    assert resp.finish_reason == "stop"
    assert resp.usage is not None and resp.usage.total_tokens == 5
    assert resp.provider == "gemini"

    sent = fake_transport.requests[0]
    assert sent.url == "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-pro:generateContent"
    assert sent.json_body["contents"] == [{"role": "user", "parts": [{"text": "2+2?"}]}]

    events = [e["event"] for e in log_capture if e.get("operation") == "generate"]
    assert events == ["generate.start", "generate.end"]
    end = [e for e in log_capture if e["event"] == "generate.end"][0]
    assert end["tokens"]["total_tokens"] == 5
    assert "g-key" not in json.dumps(log_capture)


def test_generate_openai_two_plus_two(fake_transport):
    fake_transport.queue_json(OPENAI_OK)
    resp = _openai(fake_transport).generate(_request())
    assert resp.text == "4"
    assert resp.finish_reason == "stop"
    sent = fake_transport.requests[0]
    assert sent.url == "https://api.openai.com/v1/chat/completions"
    assert sent.json_body["model"] == "gpt-4o-mini"
    assert sent.json_body["messages"] == [{"role": "user", "content": "2+2?"}]


def test_explicit_model_wins_and_missing_model_fails(fake_transport):
    fake_transport.queue_json(GEMINI_OK)
    _gemini(fake_transport).generate(_request(model="gemini-2.5-flash"))
    assert "models/gemini-2.5-flash:generateContent" in fake_transport.requests[0].url

    client = AIClient(GeminiAdapter(api_key="g-key"), fake_transport)
    with pytest.raises(ConfigurationError):
        client.generate(_request())
    assert len(fake_transport.requests) == 1


def test_generate_provider_error_is_logged_and_raised(fake_transport, log_capture):
    fake_transport.queue_json(
        {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}, status_code=429
    )
    with pytest.raises(ProviderError) as info:
        _gemini(fake_transport).generate(_request())
    assert info.value.code is ErrorCode.RATE_LIMIT
    assert info.value.retryable
    errors = [e for e in log_capture if e["event"] == "generate.error"]
    assert len(errors) == 1 and errors[0]["error_code"] == "rate_limit"


def test_stream_gemini_end_to_end(fake_transport, make_stream, splitter):
    body = json.dumps(
        [
            {"candidates": [{"content": {"parts": [{"text": "The answer"}]}, "index": 0}]},
            {
                "candidates": [{"content": {"parts": [{"text": " is 4."}]}, "finishReason": "STOP", "index": 0}],
                "usageMetadata": {"promptTokenCount": 4, "candidatesTokenCount": 4, "totalTokenCount": 8},
            },
        ],
        indent=2,
    ).encode("utf-8")
    stream_body = make_stream(splitter(body, 7))
    fake_transport.queue_stream(stream_body)
    client = _gemini(fake_transport)
    with client.generate_streamed(_request()) as stream:
        chunks = list(stream)
    assert "".join(c.delta for c in chunks) == "The answer is 4."
    assert chunks[-1].finish_reason == "stop"
    assert chunks[-1].usage is not None and chunks[-1].usage.total_tokens == 8
    assert stream.state is DecoderState.STREAM_CLOSED
    assert stream_body.close_calls == 1
    assert fake_transport.requests[0].url.endswith(":streamGenerateContent")


def test_stream_openai_collect(fake_transport, make_stream):
    sse = (
        b'data: {"id":"c","model":"gpt-4o-mini","choices":[{"index":0,"delta":{"role":"assistant","content":"4"}}]}\n\n'
        b'data: {"id":"c","model":"gpt-4o-mini","choices":[{"index":0,"delta":{},"finish_reason":"stop"}]}\n\n'
        b'data: {"id":"c","model":"gpt-4o-mini","choices":[],"usage":{"prompt_tokens":9,"completion_tokens":1,"total_tokens":10}}\n\n'
        b"data: [DONE]\n\n"
    )
    fake_transport.queue_stream(make_stream([sse]))
    resp = _openai(fake_transport).generate_streamed(_request()).collect()
    assert resp.text == "4"
    assert resp.finish_reason == "stop"
    assert resp.usage is not None and resp.usage.total_tokens == 10
    sent = fake_transport.requests[0].json_body
    assert sent["stream"] is True
    assert sent["stream_options"] == {"include_usage": True}


def test_stream_error_status_raises_before_iteration(fake_transport, make_stream, log_capture):
    body = make_stream(
        [b'{"error": {"message": "Incorrect API key", "type": "invalid_request_error", "code": "invalid_api_key"}}'],
        status_code=401,
    )
    fake_transport.queue_stream(body)
    with pytest.raises(ProviderError) as info:
        _openai(fake_transport).generate_streamed(_request())
    assert info.value.code is ErrorCode.AUTH
    assert info.value.status_code == 401
    assert body.close_calls == 1
    assert [e["event"] for e in log_capture if e.get("operation") == "stream"] == ["stream.start", "stream.error"]


def test_stream_malformed_frame_after_chunks(fake_transport, make_stream):
    sse = b'data: {"id":"c","choices":[{"index":0,"delta":{"content":"par"}}]}\n\ndata: {broken\n\n'
    body = make_stream([sse])
    fake_transport.queue_stream(body)
    stream = _openai(fake_transport).generate_streamed(_request())
    got = []
    with pytest.raises(StreamDecodeError):
        for chunk in stream:
            got.append(chunk.delta)
    assert got == ["par"]
    assert body.close_calls == 1


def test_streaming_unsupported_by_transport_fails_before_send(fake_transport):
    fake_transport.supports_streaming = False
    client = _gemini(fake_transport)
    assert not client.supports_streaming()
    with pytest.raises(UnsupportedOperation) as info:
        client.generate_streamed(_request())
    assert info.value.operation == "stream"
    assert fake_transport.requests == []


def test_count_tokens(fake_transport):
    fake_transport.queue_json({"totalTokens": 7})
    count = _gemini(fake_transport).count_tokens(_request())
    assert count.total_tokens == 7
    assert count.model == "gemini-2.5-pro"

    with pytest.raises(UnsupportedOperation):
        _openai(fake_transport).count_tokens(_request())
    assert len(fake_transport.requests) == 1


def test_list_models_follows_pages(fake_transport):
    fake_transport.queue_json({"models": [{"name": "models/a"}], "nextPageToken": "p2"})
    fake_transport.queue_json({"models": [{"name": "models/b"}], "nextPageToken": "p3"})
    fake_transport.queue_json({"models": [{"name": "models/c"}]})
    models = _gemini(fake_transport).list_models()
    assert [m.id for m in models] == ["a", "b", "c"]
    assert [r.params.get("pageToken") for r in fake_transport.requests] == [None, "p2", "p3"]


def test_list_models_stops_on_repeated_token(fake_transport):
    fake_transport.queue_json({"models": [{"name": "models/a"}], "nextPageToken": "same"})
    fake_transport.queue_json({"models": [{"name": "models/b"}], "nextPageToken": "same"})
    models = _gemini(fake_transport).list_models()
    assert [m.id for m in models] == ["a", "b"]
    assert len(fake_transport.requests) == 2


def test_get_model(fake_transport):
    fake_transport.queue_json({"id": "gpt-4o-mini", "object": "model", "owned_by": "openai"})
    info = _openai(fake_transport).get_model()
    assert info.id == "gpt-4o-mini"
    assert info.owned_by == "openai"
    assert fake_transport.requests[0].url == "https://api.openai.com/v1/models/gpt-4o-mini"


def test_non_json_success_is_protocol_error(fake_transport):
    fake_transport.responses.append(HttpResponse(status_code=200, content=b"<html>oops</html>"))
    with pytest.raises(ProtocolError) as info:
        _openai(fake_transport).generate(_request())
    assert "<html>" in (info.value.body_excerpt or "")


def test_malformed_error_envelope_is_classified_by_status(fake_transport, log_capture):
    fake_transport.queue_json({"error": {"message": 123, "param": ["n"]}}, status_code=400)
    with pytest.raises(ProviderError) as info:
        _openai(fake_transport).generate(_request())
    assert info.value.code is ErrorCode.VALIDATION
    assert info.value.status_code == 400
    errors = [e for e in log_capture if e["event"] == "generate.error"]
    assert len(errors) == 1 and errors[0]["error_code"] == "validation"


def test_gemini_system_only_request_is_not_sent(fake_transport):
    request = GenerationRequest(messages=[Message("system", "Rules only.")])
    with pytest.raises(ConfigurationError):
        _gemini(fake_transport).generate(request)
    assert fake_transport.requests == []


def test_openai_responses_mode_generate(fake_transport):
    fake_transport.queue_json(
        {
            "id": "resp_1",
            "object": "response",
            "status": "completed",
            "model": "gpt-4o-mini",
            "output": [{"type": "message", "role": "assistant", "content": [{"type": "output_text", "text": "4"}]}],
            "usage": {"input_tokens": 9, "output_tokens": 1, "total_tokens": 10},
        }
    )
    client = AIClient(OpenAIAdapter(api_key="o-key", model="gpt-4o-mini", api="responses"), fake_transport)
    resp = client.generate(_request())
    assert resp.text == "4"
    assert resp.finish_reason == "stop"
    assert resp.usage is not None and resp.usage.total_tokens == 10
    sent = fake_transport.requests[0]
    assert sent.url == "https://api.openai.com/v1/responses"
    assert sent.json_body["input"] == [{"role": "user", "content": "2+2?"}]


def test_stream_openai_refusal_collects_into_candidate(fake_transport, make_stream):
    sse = (
        b'data: {"id":"c","model":"gpt-4o-mini","choices":[{"index":0,"delta":{"role":"assistant","refusal":"Sorry, "}}]}\n\n'
        b'data: {"id":"c","model":"gpt-4o-mini","choices":[{"index":0,"delta":{"refusal":"no."},"finish_reason":"stop"}]}\n\n'
        b"data: [DONE]\n\n"
    )
    fake_transport.queue_stream(make_stream([sse]))
    resp = _openai(fake_transport).generate_streamed(_request()).collect()
    assert resp.text == ""
    assert resp.candidates[0].refusal == "Sorry, no."
