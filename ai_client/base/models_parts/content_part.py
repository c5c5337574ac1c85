"""
Content part model for multi-modal messages.

A message body is either plain text or an ordered list of `ContentPart`
objects. Two part kinds exist: text and inline binary data (images, audio,
documents) carried base64-encoded together with its MIME type.
"""
from __future__ import annotations

import base64
from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Optional


ContentPartType = Literal[
    "text",         # Plain text
    "inline_data",  # Base64 payload + MIME type
]

_PART_TYPES = ("text", "inline_data")


@dataclass
class ContentPart:
    """A single piece of message content.

    Attributes:
        type: ``"text"`` or ``"inline_data"``.
        text: Text for text parts.
        mime_type: MIME type of inline data (e.g. ``"image/png"``).
        data: Base64-encoded payload of inline data.

    Raises:
        ValueError: On an unknown ``type`` or when the fields required by the
            type are missing.
    """

    type: ContentPartType
    text: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in _PART_TYPES:
            raise ValueError(f"unknown content part type: {self.type!r}")
        if self.type == "text" and self.text is None:
            raise ValueError("text part requires 'text'")
        if self.type == "inline_data" and (not self.mime_type or self.data is None):
            raise ValueError("inline_data part requires 'mime_type' and 'data'")

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> "ContentPart":
        """Build an inline part from raw bytes, base64-encoding them."""
        return cls(type="inline_data", mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    @property
    def is_text(self) -> bool:
        return self.type == "text"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary without empty fields."""
        return {k: v for k, v in asdict(self).items() if v is not None}


__all__ = [
    "ContentPart",
    "ContentPartType",
]
