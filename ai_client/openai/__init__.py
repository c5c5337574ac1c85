"""OpenAI provider package."""

from .adapter import OpenAIAdapter

__all__ = ["OpenAIAdapter"]
