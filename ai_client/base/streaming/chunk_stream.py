"""ChunkStream: the caller-facing iterator over a live streamed generation.

A ``ChunkStream`` owns an open :class:`~ai_client.base.http.ByteStream` and a
:class:`~.decoder.StreamDecoder`. It is lazy, forward-only and single-pass:
bytes are read from the transport only while the caller iterates. The
underlying response is released when the stream is exhausted, when decoding
fails, when the caller calls :meth:`ChunkStream.close` (or leaves a ``with``
block) and when the iterator is garbage collected mid-way.

On termination one structured event is logged: ``stream.end`` with metrics
or ``stream.error`` with the normalized error code.
"""
from __future__ import annotations

import logging
import time
from contextlib import suppress
from typing import Iterator, Optional

from ..errors import ClientError, TransportError, classify_exception
from ..http.transport import ByteStream
from ..log_support import LogContext
from ..logging import normalized_log_event
from ..models import GenerationResponse, StreamChunk
from .accumulate import accumulate_chunks
from .decoder import DecoderState, StreamDecoder
from .streaming_metrics import StreamMetrics, apply_token_usage, token_usage_of


class ChunkStream:
    """Iterator of :class:`StreamChunk` values for one streamed generation."""

    def __init__(
        self,
        body: ByteStream,
        decoder: StreamDecoder,
        *,
        logger: logging.Logger,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._body = body
        self._decoder = decoder
        self._logger = logger
        self._ctx = ctx or LogContext()
        self._started = time.monotonic()
        self._released = False
        self._finalized = False
        self.metrics = StreamMetrics()
        self._gen = self._run()

    # Iteration ---------------------------------------------------------------
    def __iter__(self) -> Iterator[StreamChunk]:
        return self

    def __next__(self) -> StreamChunk:
        return next(self._gen)

    def _run(self) -> Iterator[StreamChunk]:
        try:
            for chunk in self._decoder.decode(self._body.iter_bytes()):
                self._record(chunk)
                yield chunk
        except ClientError as exc:
            self._finalize(error=exc)
            raise
        except GeneratorExit:
            self._finalize(cancelled=True)
            raise
        finally:
            self._release()
        self._finalize()

    def _record(self, chunk: StreamChunk) -> None:
        if self.metrics.emitted == 0:
            self.metrics.time_to_first_chunk_ms = (time.monotonic() - self._started) * 1000.0
        self.metrics.emitted += 1
        apply_token_usage(self.metrics, chunk.usage)

    # Lifecycle ---------------------------------------------------------------
    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        with suppress(TransportError, OSError):
            self._body.close()

    def _finalize(self, *, error: Optional[ClientError] = None, cancelled: bool = False) -> None:
        if self._finalized:
            return
        self._finalized = True
        self.metrics.frames = self._decoder.frames
        self.metrics.total_duration_ms = (time.monotonic() - self._started) * 1000.0
        if error is not None:
            normalized_log_event(
                self._logger,
                "stream.error",
                self._ctx,
                phase="error",
                error_code=classify_exception(error).value,
                emitted=self.metrics.emitted > 0,
                tokens=token_usage_of(self.metrics),
                chunks=self.metrics.emitted,
                message=error.message,
            )
            return
        normalized_log_event(
            self._logger,
            "stream.end",
            self._ctx,
            phase="finalize",
            emitted=self.metrics.emitted > 0,
            tokens=token_usage_of(self.metrics),
            chunks=self.metrics.emitted,
            cancelled=cancelled,
            time_to_first_chunk_ms=self.metrics.time_to_first_chunk_ms,
            total_duration_ms=self.metrics.total_duration_ms,
        )

    def close(self) -> None:
        """Stop the stream early and release the transport. Idempotent."""
        self._gen.close()
        # Not started generators skip their finally block.
        self._release()
        self._finalize(cancelled=self._decoder.state is not DecoderState.STREAM_CLOSED)

    def __enter__(self) -> "ChunkStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Inspection --------------------------------------------------------------
    @property
    def state(self) -> DecoderState:
        return self._decoder.state

    @property
    def closed(self) -> bool:
        return self._released

    @property
    def status_code(self) -> int:
        return self._body.status_code

    def collect(self) -> GenerationResponse:
        """Drain the remaining chunks into one :class:`GenerationResponse`."""
        return accumulate_chunks(self, provider=self._ctx.provider)


__all__ = ["ChunkStream"]
