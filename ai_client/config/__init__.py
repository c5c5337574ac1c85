"""Unified configuration layer.

Goals
-----
* Centralize defaults (models, base URLs, API versions).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) named by AI_CLIENT_CONFIG_FILE
    3. Environment variables (e.g. GEMINI_MODEL, OPENAI_BASE_URL)
    4. Provider API key variables (GEMINI_API_KEY / GOOGLE_API_KEY, OPENAI_API_KEY)
    5. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider)``.

Environment Variable Conventions
--------------------------------
<PROVIDER>_MODEL, <PROVIDER>_API_KEY, <PROVIDER>_BASE_URL, <PROVIDER>_API_VERSION,
<PROVIDER>_AUTH_MODE, <PROVIDER>_ORGANIZATION, <PROVIDER>_API; e.g. GEMINI_API_VERSION=v1.

External Config File (Optional)
-------------------------------
``*.json`` files are parsed as JSON, anything else with PyYAML::

    gemini:
      model: gemini-2.5-flash
      api_version: v1
    openai:
      model: gpt-4o-mini
      base_url: https://gateway.internal

A ``.env`` file (path from AI_CLIENT_DOTENV_FILE, default ``./.env``) is
loaded once before environment variables are read.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    GEMINI_DEFAULT_API_VERSION,
    GEMINI_DEFAULT_AUTH_MODE,
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    OPENAI_DEFAULT_API,
    OPENAI_DEFAULT_API_VERSION,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
)
from .env import is_placeholder, resolve_provider_key

CONFIG_FILE_ENV = "AI_CLIENT_CONFIG_FILE"
DOTENV_FILE_ENV = "AI_CLIENT_DOTENV_FILE"


DEFAULTS: Dict[str, Dict[str, Any]] = {
    "gemini": {
        "model": GEMINI_DEFAULT_MODEL,
        "base_url": GEMINI_DEFAULT_BASE_URL,
        "api_version": GEMINI_DEFAULT_API_VERSION,
        "auth_mode": GEMINI_DEFAULT_AUTH_MODE,
    },
    "openai": {
        "model": OPENAI_DEFAULT_MODEL,
        "base_url": OPENAI_DEFAULT_BASE_URL,
        "api_version": OPENAI_DEFAULT_API_VERSION,
        "api": OPENAI_DEFAULT_API,
    },
}


ENV_FIELD_MAP = {
    "model": "MODEL",
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
    "api_version": "API_VERSION",
    "auth_mode": "AUTH_MODE",
    "organization": "ORGANIZATION",
    "api": "API",
}


_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Parse KEY=VALUE lines from the dotenv file once per process.

    Comments and blank lines are ignored. Existing variables are only
    replaced when they hold placeholder values.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    _DOTENV_LOADED = True
    path = os.getenv(DOTENV_FILE_ENV, ".env")
    if not os.path.isfile(path):
        return
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip()
            if k.startswith("export "):
                k = k[len("export ") :].strip()
            v = v.strip().strip('"').strip("'")
            if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                os.environ[k] = v


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv(CONFIG_FILE_ENV)
    data: Any = {}
    if path and Path(path).is_file():
        text = Path(path).read_text(encoding="utf-8")
        data = json.loads(text) if path.endswith(".json") else yaml.safe_load(text)
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val:
            out[field] = val
    return out


def reset_config_cache() -> None:
    """Forget the cached config file and dotenv state (used by tests)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> config file -> env vars -> key
    variables (only when no key is set yet) -> overrides. ``None`` override
    values are ignored.
    """
    _load_dotenv_once()
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if not cfg.get("api_key") or is_placeholder(cfg.get("api_key")):
        key, _ = resolve_provider_key(name)
        if key:
            cfg["api_key"] = key

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


__all__ = [
    "get_provider_config",
    "get_model",
    "reset_config_cache",
    "DEFAULTS",
    "ENV_FIELD_MAP",
    "CONFIG_FILE_ENV",
    "DOTENV_FILE_ENV",
]
