"""Gemini provider package."""

from .adapter import GeminiAdapter

__all__ = ["GeminiAdapter"]
