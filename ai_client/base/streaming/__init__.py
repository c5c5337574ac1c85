"""Streaming package public surface.

Framers split byte streams into frames, the decoder turns frames into
``StreamChunk`` values through a provider parser, and ``ChunkStream`` is the
iterator handed to callers.
"""

from .framing import COMPACT_THRESHOLD, Framer, FramingError, JsonArrayFramer, LineFramer, SseFramer
from .decoder import END_OF_STREAM, DecoderState, FrameParser, FrameResult, StreamDecoder
from .streaming_metrics import StreamMetrics, apply_token_usage, build_token_usage, token_usage_of
from .accumulate import accumulate_chunks
from .chunk_stream import ChunkStream

__all__ = [
    "COMPACT_THRESHOLD",
    "Framer",
    "FramingError",
    "JsonArrayFramer",
    "LineFramer",
    "SseFramer",
    "END_OF_STREAM",
    "DecoderState",
    "FrameParser",
    "FrameResult",
    "StreamDecoder",
    "StreamMetrics",
    "apply_token_usage",
    "build_token_usage",
    "token_usage_of",
    "accumulate_chunks",
    "ChunkStream",
]
