"""Incremental stream framers.

A framer turns an arbitrarily fragmented byte stream into complete frames.
Each framer keeps one ``bytearray`` buffer plus an index cursor: bytes are
examined once, the consumed prefix is dropped lazily, and nothing is
re-scanned when a frame is split across many reads. The frames produced
are independent of how the input was split.

Three framing rules are provided:

``LineFramer``
    Newline-delimited JSON. Blank lines are skipped, ``\\r\\n`` is accepted.
``SseFramer``
    Server-Sent Events. The ``data:`` lines of one event are joined with
    ``\\n``; a blank line dispatches the event; comment lines are ignored.
``JsonArrayFramer``
    A (possibly pretty-printed) JSON array of objects, as emitted by
    Gemini's ``streamGenerateContent``. Each top-level object is a frame and
    the closing ``]`` terminates the stream.

``feed`` is a generator yielding frames as soon as they are complete, so a
malformed byte only raises after every earlier frame has been produced.
``flush`` is called once at end of input and yields a trailing frame that
lacks its delimiter.
"""
from __future__ import annotations

from typing import Iterator, List, Optional

# Drop the consumed prefix once it grows past this many bytes.
COMPACT_THRESHOLD = 64 * 1024

_WHITESPACE = frozenset(b" \t\r\n")


class FramingError(ValueError):
    """Raised when the byte stream violates the framing rule."""


class Framer:
    """Base class holding the buffer/cursor bookkeeping."""

    name = "framer"

    def __init__(self) -> None:
        self._buf = bytearray()
        self._start = 0  # first unconsumed byte
        self._scan = 0  # first byte not yet examined
        self.terminated = False

    @property
    def pending(self) -> int:
        """Number of buffered, not yet framed bytes."""
        return len(self._buf) - self._start

    def _compact(self) -> None:
        if self._start and (self._start >= COMPACT_THRESHOLD or self._start == len(self._buf)):
            del self._buf[: self._start]
            self._scan -= self._start
            self._on_compact(self._start)
            self._start = 0

    def _on_compact(self, shift: int) -> None:
        """Hook for subclasses holding extra buffer offsets."""

    def feed(self, data: bytes) -> Iterator[bytes]:
        raise NotImplementedError

    def flush(self) -> Iterator[bytes]:
        raise NotImplementedError


class LineFramer(Framer):
    """Newline-delimited frames (NDJSON)."""

    name = "ndjson"

    def _lines(self) -> Iterator[bytes]:
        buf = self._buf
        while True:
            idx = buf.find(b"\n", self._scan)
            if idx < 0:
                self._scan = len(buf)
                return
            line = bytes(buf[self._start : idx]).rstrip(b"\r")
            self._start = self._scan = idx + 1
            yield line

    def feed(self, data: bytes) -> Iterator[bytes]:
        if self.terminated:
            return
        self._buf.extend(data)
        for line in self._lines():
            if line.strip():
                yield line
        self._compact()

    def flush(self) -> Iterator[bytes]:
        tail = bytes(self._buf[self._start :]).rstrip(b"\r")
        self._buf.clear()
        self._start = self._scan = 0
        self.terminated = True
        if tail.strip():
            yield tail


class SseFramer(LineFramer):
    """Server-Sent Events framing; each frame is an event's joined data."""

    name = "sse"

    def __init__(self) -> None:
        super().__init__()
        self._data: List[bytes] = []
        self.last_event: Optional[str] = None

    def _dispatch(self) -> Optional[bytes]:
        if not self._data:
            return None
        frame = b"\n".join(self._data)
        self._data = []
        return frame

    def _field(self, line: bytes) -> Optional[bytes]:
        """Apply one line to the pending event; return a frame on dispatch."""
        if not line:
            return self._dispatch()
        if line.startswith(b":"):
            return None
        name, sep, value = line.partition(b":")
        if sep and value.startswith(b" "):
            value = value[1:]
        if name == b"data":
            self._data.append(value)
        elif name == b"event":
            self.last_event = value.decode("utf-8", errors="replace")
        return None

    def feed(self, data: bytes) -> Iterator[bytes]:
        if self.terminated:
            return
        self._buf.extend(data)
        for line in self._lines():
            frame = self._field(line)
            if frame is not None:
                yield frame
        self._compact()

    def flush(self) -> Iterator[bytes]:
        tail = bytes(self._buf[self._start :]).rstrip(b"\r")
        self._buf.clear()
        self._start = self._scan = 0
        self.terminated = True
        if tail:
            self._field(tail)
        frame = self._dispatch()
        if frame is not None:
            yield frame


class JsonArrayFramer(Framer):
    """Top-level objects of a streamed JSON array.

    Tracks nesting depth plus string/escape state so braces inside string
    values never confuse the scanner. Separators (``[``, ``,`` and
    whitespace) between objects are skipped; a top-level ``]`` terminates
    the stream and any later bytes are ignored. A bare sequence of objects
    (no enclosing array) is accepted too.
    """

    name = "json_array"

    def __init__(self) -> None:
        super().__init__()
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._opened = False
        self._obj_start = 0

    def _on_compact(self, shift: int) -> None:
        self._obj_start = max(0, self._obj_start - shift)

    def feed(self, data: bytes) -> Iterator[bytes]:  # noqa: C901 - single scanning loop
        if self.terminated:
            return
        buf = self._buf
        buf.extend(data)
        i = self._scan
        end = len(buf)
        while i < end:
            c = buf[i]
            if self._depth == 0:
                if c in _WHITESPACE or c == 0x2C:  # ','
                    pass
                elif c == 0x5B and not self._opened:  # '['
                    self._opened = True
                elif c == 0x5D:  # ']'
                    self.terminated = True
                    self._start = self._scan = i + 1
                    self._compact()
                    return
                elif c == 0x7B:  # '{'
                    self._depth = 1
                    self._obj_start = i
                else:
                    self._scan = i
                    raise FramingError(f"unexpected byte {bytes([c])!r} between JSON array elements")
                if self._depth == 0:
                    self._start = i + 1
            elif self._in_string:
                if self._escape:
                    self._escape = False
                elif c == 0x5C:  # '\\'
                    self._escape = True
                elif c == 0x22:  # '"'
                    self._in_string = False
            elif c == 0x22:
                self._in_string = True
            elif c in (0x7B, 0x5B):
                self._depth += 1
            elif c in (0x7D, 0x5D):
                self._depth -= 1
                if self._depth == 0:
                    frame = bytes(buf[self._obj_start : i + 1])
                    self._start = self._scan = i + 1
                    yield frame
            i += 1
        self._scan = end
        self._compact()

    def flush(self) -> Iterator[bytes]:
        if self.terminated:
            return
        incomplete = self._depth > 0
        tail = bytes(self._buf[self._obj_start :]) if incomplete else b""
        self._buf.clear()
        self._start = self._scan = 0
        self.terminated = True
        if incomplete:
            raise FramingError(f"stream ended inside a JSON object: {tail[:80]!r}")
        if self._opened:
            raise FramingError("stream ended before the closing ']' of the JSON array")
        yield from ()


__all__ = [
    "COMPACT_THRESHOLD",
    "FramingError",
    "Framer",
    "LineFramer",
    "SseFramer",
    "JsonArrayFramer",
]
