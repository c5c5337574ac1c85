"""Typed parameter object for client construction.

Purpose
-------
Capture the settings needed to bind an ``AIClient`` to one provider: default
model, credentials, endpoint overrides and static headers. The factory merges
these values over the layered configuration from :mod:`ai_client.config`.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for validation and ``.model_dump()``.

Failure modes
-------------
Pure data container. Pydantic raises ``ValidationError`` for wrongly typed
inputs (e.g. a non-positive timeout or an unknown ``auth_mode``).
"""
from __future__ import annotations

from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientParams(BaseModel):
    """Common client initialization parameters.

    Attributes
    ----------
    provider:
        Canonical provider name (``"gemini"`` or ``"openai"``). Optional when
        the provider is passed separately.
    model:
        Default model used when a request leaves ``model`` unset.
    api_key:
        Credential passed explicitly; otherwise resolved from the environment.
    base_url:
        Override for the API host (proxies, gateways, test servers).
    api_version:
        API version path segment (``"v1beta"`` for Gemini, ``"v1"`` for OpenAI).
    organization:
        OpenAI organization header value.
    auth_mode:
        Gemini credential placement: ``"header"`` (``x-goog-api-key``) or
        ``"query"`` (``?key=``).
    api:
        OpenAI endpoint family: ``"chat"`` (chat completions, default) or
        ``"responses"``.
    timeout_seconds:
        Read timeout for the default transport.
    headers:
        Static headers added to every request.
    extra:
        Provider-specific settings bag.
    """

    model_config = ConfigDict(extra="forbid")

    provider: Optional[str] = None
    model: Optional[str] = None
    api_key: Optional[str] = Field(default=None, repr=False)
    base_url: Optional[str] = None
    api_version: Optional[str] = None
    organization: Optional[str] = None
    auth_mode: Optional[Literal["header", "query"]] = None
    api: Optional[Literal["chat", "responses"]] = None
    timeout_seconds: Optional[float] = Field(default=None, gt=0)
    headers: Mapping[str, str] = Field(default_factory=dict)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("provider", "model", "api_key", "base_url", "api_version", "organization")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def overrides(self) -> Dict[str, Any]:
        """Return the explicitly set, non-empty settings as a plain dict."""
        data = self.model_dump(exclude={"provider", "headers", "extra"}, exclude_none=True)
        if self.headers:
            data["headers"] = dict(self.headers)
        if self.extra:
            data["extra"] = dict(self.extra)
        return data


__all__ = ["ClientParams"]
