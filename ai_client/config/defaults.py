"""ai_client.config.defaults
=========================

Central place for small, stable default values. Everything here can be
overridden through the layered configuration in :mod:`ai_client.config`
(config file, environment variables, explicit overrides).

This module performs no I/O and imports nothing from the rest of the package
so it can be used from any layer without circular imports.
"""

from __future__ import annotations

# ---- Gemini (Generative Language API) ----
GEMINI_DEFAULT_MODEL = "gemini-2.5-pro"
GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
GEMINI_DEFAULT_API_VERSION = "v1beta"
# Credential placement: "header" (x-goog-api-key) or "query" (?key=).
GEMINI_DEFAULT_AUTH_MODE = "header"
# Page size requested when listing models.
GEMINI_LIST_MODELS_PAGE_SIZE = 50

# ---- OpenAI ----
OPENAI_DEFAULT_MODEL = "gpt-5"
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com"
OPENAI_DEFAULT_API_VERSION = "v1"
# Endpoint family: "chat" (/chat/completions) or "responses" (/responses).
OPENAI_DEFAULT_API = "chat"
OPENAI_APIS = ("chat", "responses")
# The chat completions endpoint rejects more stop sequences than this.
OPENAI_MAX_STOP_SEQUENCES = 4
# Model families that reject sampling parameters and accept reasoning_effort.
OPENAI_REASONING_MODEL_PREFIXES = ("o1", "o3", "o4", "gpt-5")

# ---- Listing ----
# Safety bound on followed pagination tokens.
LIST_MODELS_MAX_PAGES = 100

__all__ = [
    "GEMINI_DEFAULT_MODEL",
    "GEMINI_DEFAULT_BASE_URL",
    "GEMINI_DEFAULT_API_VERSION",
    "GEMINI_DEFAULT_AUTH_MODE",
    "GEMINI_LIST_MODELS_PAGE_SIZE",
    "OPENAI_DEFAULT_MODEL",
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_API_VERSION",
    "OPENAI_DEFAULT_API",
    "OPENAI_APIS",
    "OPENAI_MAX_STOP_SEQUENCES",
    "OPENAI_REASONING_MODEL_PREFIXES",
    "LIST_MODELS_MAX_PAGES",
]
