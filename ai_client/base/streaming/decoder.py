"""Push-based streaming decoder.

:class:`StreamDecoder` combines a :class:`~.framing.Framer` (where frames
begin and end) with a provider frame parser (what a frame means). It is
independent of I/O: callers push byte blocks with :meth:`StreamDecoder.feed`
and signal end of input with :meth:`StreamDecoder.close`, or hand an
iterable of blocks to :meth:`StreamDecoder.decode`.

State machine::

    ACCUMULATING_FRAME --frame complete--> FRAME_READY --parsed--> ACCUMULATING_FRAME
    FRAME_READY --terminal sentinel--> STREAM_CLOSED
    ACCUMULATING_FRAME --end of input--> STREAM_CLOSED
    any --malformed frame / provider error--> STREAM_ERROR

``STREAM_CLOSED`` and ``STREAM_ERROR`` are terminal; further input is
ignored. A failure raises exactly once, after every chunk decoded from
earlier frames has been yielded, and there is no resynchronization.

``feed`` and ``close`` are generators: input is only consumed while the
returned iterator is being drained.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Iterator, Optional, Sequence, Union

from ..errors import ClientError, ErrorCode, ProtocolError, StreamDecodeError, excerpt
from ..models import StreamChunk
from .framing import Framer, FramingError


class _EndOfStream:
    """Sentinel returned by frame parsers for the terminal marker."""

    _instance: Optional["_EndOfStream"] = None

    def __new__(cls) -> "_EndOfStream":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "END_OF_STREAM"


END_OF_STREAM = _EndOfStream()

FrameResult = Union[Sequence[StreamChunk], _EndOfStream]
FrameParser = Callable[[bytes], FrameResult]


class DecoderState(str, Enum):
    ACCUMULATING_FRAME = "accumulating_frame"
    FRAME_READY = "frame_ready"
    STREAM_CLOSED = "stream_closed"
    STREAM_ERROR = "stream_error"


_TERMINAL = (DecoderState.STREAM_CLOSED, DecoderState.STREAM_ERROR)


class StreamDecoder:
    """Decode a provider byte stream into ordered :class:`StreamChunk` values.

    Parameters
    ----------
    framer:
        Fresh framer instance owned exclusively by this decoder.
    parse_frame:
        Provider parser returning the chunks carried by one frame (possibly
        none, e.g. for keep-alive frames) or ``END_OF_STREAM``. It raises
        ``ProviderError`` for an in-band error envelope; any other exception
        marks the frame as malformed.
    provider, model:
        Context attached to raised errors.
    """

    def __init__(
        self,
        framer: Framer,
        parse_frame: FrameParser,
        *,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        self._framer = framer
        self._parse_frame = parse_frame
        self._provider = provider
        self._model = model
        self.state = DecoderState.ACCUMULATING_FRAME
        self.emitted = 0
        self.frames = 0
        self.error: Optional[ClientError] = None

    @property
    def terminal(self) -> bool:
        return self.state in _TERMINAL

    def _fail(self, err: ClientError) -> ClientError:
        self.state = DecoderState.STREAM_ERROR
        self.error = err
        return err

    def _decode_error(self, message: str, frame: bytes, cause: Optional[BaseException] = None) -> StreamDecodeError:
        return StreamDecodeError(
            code=ErrorCode.PROTOCOL,
            message=message,
            provider=self._provider,
            model=self._model,
            raw=cause,
            frame_excerpt=excerpt(frame),
            chunks_emitted=self.emitted,
        )

    def _handle(self, frame: bytes) -> Iterator[StreamChunk]:
        self.state = DecoderState.FRAME_READY
        self.frames += 1
        try:
            result = self._parse_frame(frame)
        except StreamDecodeError as exc:
            self._fail(exc)
            raise
        except ProtocolError as exc:
            raise self._fail(self._decode_error(f"malformed stream frame: {exc.message}", frame, exc)) from exc
        except ClientError as exc:
            self._fail(exc)
            raise
        except (ValueError, TypeError, KeyError) as exc:
            raise self._fail(self._decode_error(f"malformed stream frame: {exc}", frame, exc)) from exc
        if result is END_OF_STREAM:
            self.state = DecoderState.STREAM_CLOSED
            return
        for chunk in result:
            self.emitted += 1
            yield chunk
        self.state = DecoderState.ACCUMULATING_FRAME

    def _drain(self, frames: Iterator[bytes]) -> Iterator[StreamChunk]:
        try:
            for frame in frames:
                yield from self._handle(frame)
                if self.terminal:
                    return
        except FramingError as exc:
            raise self._fail(self._decode_error(str(exc), b"", exc)) from exc
        if self._framer.terminated and not self.terminal:
            self.state = DecoderState.STREAM_CLOSED

    def feed(self, data: bytes) -> Iterator[StreamChunk]:
        """Append ``data`` and yield every chunk that became decodable."""
        if self.terminal or not data:
            return
        yield from self._drain(self._framer.feed(data))

    def close(self) -> Iterator[StreamChunk]:
        """Signal end of input and yield chunks of a trailing frame."""
        if self.terminal:
            return
        yield from self._drain(self._framer.flush())
        if not self.terminal:
            self.state = DecoderState.STREAM_CLOSED

    def decode(self, blocks: Iterable[bytes]) -> Iterator[StreamChunk]:
        """Decode a whole block iterable; stops reading at the terminal sentinel."""
        for block in blocks:
            yield from self.feed(block)
            if self.terminal:
                return
        yield from self.close()


__all__ = [
    "END_OF_STREAM",
    "DecoderState",
    "FrameParser",
    "FrameResult",
    "StreamDecoder",
]
