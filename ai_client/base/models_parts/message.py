"""
Message DTO used across providers.

Defines the `Message` dataclass and the `Role` literal. Content may be plain
text or an ordered list of `ContentPart` objects.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Union

from .content_part import ContentPart


Role = Literal["system", "user", "assistant"]

ROLES = ("system", "user", "assistant")


@dataclass
class Message:
    """A chat message in provider-agnostic form.

    Attributes:
        role: ``"system"``, ``"user"`` or ``"assistant"``. Any other value is
            rejected at construction, never coerced.
        content: Plain text or a list of `ContentPart` items.
    """

    role: Role
    content: Union[str, List[ContentPart]]

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"unknown message role: {self.role!r}")
        if not isinstance(self.content, (str, list)):
            raise ValueError("message content must be a string or a list of ContentPart")

    def is_structured(self) -> bool:
        """Return True if the message content is a structured list of parts."""
        return isinstance(self.content, list)

    def parts(self) -> List[ContentPart]:
        """Return the content as a list of parts (text wrapped in one part)."""
        if isinstance(self.content, str):
            return [ContentPart.from_text(self.content)]
        return list(self.content)

    def text_or_joined(self) -> str:
        """Return a flattened text view of the content.

        Text parts are joined with newlines; inline parts appear as a
        bracketed MIME type token.
        """
        if isinstance(self.content, str):
            return self.content
        out: List[str] = []
        for p in self.content:
            out.append(p.text if p.is_text and p.text is not None else f"[{p.mime_type or p.type}]")
        return "\n".join(out)

    def to_dict(self) -> Dict[str, Any]:
        content: Any = self.content if isinstance(self.content, str) else [p.to_dict() for p in self.content]
        return {"role": self.role, "content": content}


__all__ = [
    "Message",
    "Role",
    "ROLES",
]
