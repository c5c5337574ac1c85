"""StreamDecoder state machine tests.

Covers:
- chunks in order across arbitrary block splits
- terminal sentinel closes the stream and later bytes are ignored
- malformed frame: one ``StreamDecodeError`` after all earlier chunks
- provider error envelope in-band: one ``ProviderError``, same semantics
- framing violations surface as ``StreamDecodeError``
- trailing frame without delimiter is decoded on close
"""
from __future__ import annotations

import json
from typing import List

import pytest

from ai_client.base.errors import ErrorCode, ProviderError, StreamDecodeError
from ai_client.base.models import StreamChunk
from ai_client.base.streaming import (
    END_OF_STREAM,
    DecoderState,
    JsonArrayFramer,
    LineFramer,
    StreamDecoder,
)


def _parse(frame: bytes):
    if frame == b"[DONE]":
        return END_OF_STREAM
    body = json.loads(frame)
    if "error" in body:
        raise ProviderError(code=ErrorCode.RATE_LIMIT, message=body["error"], provider="fake")
    return [StreamChunk(candidate_index=i, delta=t) for i, t in enumerate(body["t"])]


def _decoder(framer=None) -> StreamDecoder:
    return StreamDecoder(framer or LineFramer(), _parse, provider="fake", model="m")


def _deltas(chunks: List[StreamChunk]) -> List[str]:
    return [c.delta for c in chunks]


BODY = b'{"t": ["He"]}\n{"t": ["llo"]}\n{"t": [", ", "alt"]}\n[DONE]\n'


def test_decode_is_split_invariant():
    expected = ["He", "llo", ", ", "alt"]
    for size in (1, 2, 5, len(BODY)):
        blocks = [BODY[i : i + size] for i in range(0, len(BODY), size)]
        dec = _decoder()
        assert _deltas(list(dec.decode(blocks))) == expected
        assert dec.state is DecoderState.STREAM_CLOSED
        assert dec.emitted == 4


def test_multi_candidate_frame_keeps_provider_order():
    chunks = list(_decoder().decode([b'{"t": ["a", "b", "c"]}\n']))
    assert [(c.candidate_index, c.delta) for c in chunks] == [(0, "a"), (1, "b"), (2, "c")]


def test_sentinel_ignores_following_bytes():
    dec = _decoder()
    chunks = list(dec.feed(b'{"t": ["x"]}\n[DONE]\n{"t": ["late"]}\n'))
    assert _deltas(chunks) == ["x"]
    assert dec.state is DecoderState.STREAM_CLOSED
    assert list(dec.feed(b'{"t": ["later"]}\n')) == []
    assert list(dec.close()) == []


def test_trailing_frame_is_decoded_on_close():
    dec = _decoder()
    assert _deltas(list(dec.feed(b'{"t": ["one"]}\n{"t": ["two"]}'))) == ["one"]
    assert dec.state is DecoderState.ACCUMULATING_FRAME
    assert _deltas(list(dec.close())) == ["two"]
    assert dec.state is DecoderState.STREAM_CLOSED


def test_malformed_frame_raises_once_after_earlier_chunks():
    dec = _decoder()
    seen: List[str] = []
    with pytest.raises(StreamDecodeError) as info:
        for chunk in dec.decode([b'{"t": ["ok"]}\n{"t": [', b"broken\n", b'{"t": ["never"]}\n']):
            seen.append(chunk.delta)
    assert seen == ["ok"]
    err = info.value
    assert err.code is ErrorCode.PROTOCOL
    assert err.chunks_emitted == 1
    assert "broken" in (err.frame_excerpt or "")
    assert err.provider == "fake" and err.model == "m"
    assert dec.state is DecoderState.STREAM_ERROR
    assert dec.error is err
    assert list(dec.feed(b'{"t": ["more"]}\n')) == []
    assert list(dec.close()) == []


def test_in_band_provider_error_is_terminal():
    dec = _decoder()
    seen: List[str] = []
    with pytest.raises(ProviderError) as info:
        for chunk in dec.decode([b'{"t": ["a"]}\n{"error": "slow down"}\n{"t": ["b"]}\n']):
            seen.append(chunk.delta)
    assert seen == ["a"]
    assert info.value.code is ErrorCode.RATE_LIMIT
    assert dec.state is DecoderState.STREAM_ERROR


def test_missing_field_is_a_decode_error():
    dec = _decoder()
    with pytest.raises(StreamDecodeError):
        list(dec.decode([b'{"other": 1}\n']))


def test_framing_violation_is_a_decode_error():
    dec = StreamDecoder(JsonArrayFramer(), _parse, provider="fake")
    seen: List[str] = []
    with pytest.raises(StreamDecodeError):
        for chunk in dec.decode([b'[{"t": ["a"]},', b" nope"]):
            seen.append(chunk.delta)
    assert seen == ["a"]
    assert dec.state is DecoderState.STREAM_ERROR


def test_json_array_close_bracket_closes_stream():
    dec = StreamDecoder(JsonArrayFramer(), _parse, provider="fake")
    blocks = [b'[{"t": ["a"]}', b',{"t": ["b"]}]', b'{"t": ["ignored"]}']
    assert _deltas(list(dec.decode(blocks))) == ["a", "b"]
    assert dec.state is DecoderState.STREAM_CLOSED
    assert dec.frames == 2


def test_truncated_json_array_is_a_decode_error():
    dec = StreamDecoder(JsonArrayFramer(), _parse, provider="fake")
    with pytest.raises(StreamDecodeError):
        list(dec.decode([b'[{"t": ["a"]}, {"t": ']))
    assert dec.emitted == 1


def test_json_array_dropped_between_elements_is_a_decode_error():
    dec = StreamDecoder(JsonArrayFramer(), _parse, provider="fake")
    seen: List[str] = []
    with pytest.raises(StreamDecodeError):
        for chunk in dec.decode([b'[{"t": ["par"]}', b",\r\n"]):
            seen.append(chunk.delta)
    assert seen == ["par"]
    assert dec.state is DecoderState.STREAM_ERROR
