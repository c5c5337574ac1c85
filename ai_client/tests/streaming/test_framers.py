"""Framer tests.

Covers:
- identical frames for every split of the same bytes (line, SSE, JSON array)
- trailing frames without a delimiter are flushed
- SSE comments, multi-line data and CRLF handling
- JSON array scanner: braces inside strings, escapes, ``]`` termination
- framing violations raise ``FramingError``
"""
from __future__ import annotations

import json
from typing import List

import pytest

from ai_client.base.streaming import JsonArrayFramer, LineFramer, SseFramer
from ai_client.base.streaming.framing import COMPACT_THRESHOLD, FramingError


def _frames(framer, blocks: List[bytes]) -> List[bytes]:
    out: List[bytes] = []
    for block in blocks:
        out.extend(framer.feed(block))
    out.extend(framer.flush())
    return out


def _splits(data: bytes):
    yield [data]
    yield [bytes([b]) for b in data]
    for size in (2, 3, 7, 16):
        yield [data[i : i + size] for i in range(0, len(data), size)]


NDJSON = b'{"a": 1}\n\n{"b": "x\\ny"}\r\n{"c": [1, 2]}'

SSE = (
    b": keep-alive\n"
    b"data: {\"n\": 1}\n\n"
    b"event: message\n"
    b"data: {\"n\":\n"
    b"data: 2}\n\n"
    b"data: [DONE]\n\n"
)

JSON_ARRAY = (
    b'[{"text": "brace } and [ bracket", "n": 1}\n'
    b',\r\n{"nested": {"deep": [1, {"x": "\\"quoted\\""}]}, "n": 2}\n'
    b',{"n": 3, "esc": "back\\\\slash"}]'
)


@pytest.mark.parametrize(
    "factory,data,expected",
    [
        (LineFramer, NDJSON, [b'{"a": 1}', b'{"b": "x\\ny"}', b'{"c": [1, 2]}']),
        (SseFramer, SSE, [b'{"n": 1}', b'{"n":\n2}', b"[DONE]"]),
    ],
)
def test_line_based_framers_are_split_invariant(factory, data, expected):
    for blocks in _splits(data):
        assert _frames(factory(), blocks) == expected


def test_json_array_framer_is_split_invariant():
    for blocks in _splits(JSON_ARRAY):
        frames = _frames(JsonArrayFramer(), blocks)
        assert [json.loads(f)["n"] for f in frames] == [1, 2, 3]
        assert json.loads(frames[0])["text"] == "brace } and [ bracket"
        assert json.loads(frames[1])["nested"]["deep"][1]["x"] == '"quoted"'


def test_line_framer_flushes_trailing_frame_without_newline():
    framer = LineFramer()
    assert list(framer.feed(b'{"a": 1}\n{"b"')) == [b'{"a": 1}']
    assert list(framer.feed(b": 2}")) == []
    assert list(framer.flush()) == [b'{"b": 2}']
    assert framer.terminated


def test_sse_framer_dispatches_pending_event_on_flush():
    framer = SseFramer()
    assert list(framer.feed(b"data: one\n")) == []
    assert list(framer.flush()) == [b"one"]


def test_sse_framer_tracks_event_name_and_ignores_unknown_fields():
    framer = SseFramer()
    frames = list(framer.feed(b"id: 7\nretry: 10\nevent: delta\ndata:tight\n\n"))
    assert frames == [b"tight"]
    assert framer.last_event == "delta"


def test_json_array_framer_terminates_on_closing_bracket():
    framer = JsonArrayFramer()
    frames = list(framer.feed(b'[{"n": 1}] trailing garbage'))
    assert frames == [b'{"n": 1}']
    assert framer.terminated
    assert list(framer.feed(b'{"n": 2}')) == []


def test_json_array_framer_accepts_bare_object_sequence():
    assert _frames(JsonArrayFramer(), [b'{"n": 1}\n{"n": 2}\n']) == [b'{"n": 1}', b'{"n": 2}']


def test_json_array_framer_rejects_bytes_between_elements():
    framer = JsonArrayFramer()
    gen = framer.feed(b'[{"n": 1}, oops]')
    assert next(gen) == b'{"n": 1}'
    with pytest.raises(FramingError):
        next(gen)


def test_json_array_framer_flush_inside_object_raises():
    framer = JsonArrayFramer()
    assert list(framer.feed(b'[{"n": 1}, {"n": ')) == [b'{"n": 1}']
    with pytest.raises(FramingError):
        list(framer.flush())


def test_consumed_prefix_is_compacted():
    framer = LineFramer()
    line = b"x" * 1024 + b"\n"
    for _ in range(COMPACT_THRESHOLD // 1024 + 4):
        assert list(framer.feed(line)) == [line[:-1]]
    assert framer.pending == 0
    assert len(framer._buf) < COMPACT_THRESHOLD  # type: ignore[attr-defined]


def test_json_array_framer_flush_without_closing_bracket_raises():
    framer = JsonArrayFramer()
    assert list(framer.feed(b'[{"n": 1},\r\n')) == [b'{"n": 1}']
    with pytest.raises(FramingError):
        list(framer.flush())


def test_json_array_framer_flush_after_closing_bracket_is_clean():
    assert _frames(JsonArrayFramer(), [b'[{"n": 1}', b"]\n"]) == [b'{"n": 1}']
