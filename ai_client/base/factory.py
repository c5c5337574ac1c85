"""Provider factory utilities.

Purpose
-------
Create provider adapters (and clients bound to them) by canonical name.
Adapters are imported lazily using ``importlib`` so importing the package
does not pull in every provider module.

Configuration
-------------
Constructor settings come from :func:`ai_client.config.get_provider_config`
(defaults, config file, environment, API key variables) with explicit
``ClientParams`` and keyword arguments layered on top. Only the keys an
adapter declares in ``config_keys`` are passed to its constructor.

Failure modes
-------------
- Unknown provider names, import failures and bad constructor arguments
  raise :class:`UnknownProviderError`.
- A missing API key raises :class:`ConfigurationError` from the adapter and
  is not wrapped.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from ..config import get_provider_config
from .dto.client_params import ClientParams
from .errors import ClientError, ConfigurationError, ErrorCode
from .http import HttpxTransport, Transport
from .timeouts import TimeoutConfig, get_timeout_config


class UnknownProviderError(Exception):
    """Raised when a provider cannot be resolved or initialized."""


class ProviderFactory:
    """Create provider adapters based on a canonical name (e.g. ``"gemini"``)."""

    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "gemini": {"module": "ai_client.gemini.adapter", "class": "GeminiAdapter"},
        "openai": {"module": "ai_client.openai.adapter", "class": "OpenAIAdapter"},
    }

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Return the supported canonical provider names."""
        return tuple(cls._PROVIDERS.keys())

    @classmethod
    def adapter_class(cls, provider: str) -> Type:
        name = (provider or "").lower().strip()
        spec = cls._PROVIDERS.get(name)
        if not spec:
            raise UnknownProviderError(
                f"Unknown provider '{provider}' (supported: {', '.join(cls.supported())})"
            )
        module_path, class_name = spec["module"], spec["class"]
        try:
            mod = import_module(module_path)
        except ImportError as exc:  # pragma: no cover - import failure path
            raise UnknownProviderError(
                f"Failed to import module '{module_path}' for provider '{provider}': {exc}"
            ) from exc
        try:
            return getattr(mod, class_name)
        except AttributeError as exc:
            raise UnknownProviderError(
                f"Adapter class '{class_name}' not found in '{module_path}' for provider '{provider}'"
            ) from exc

    @staticmethod
    def _coerce_params(params: Optional[ClientParams], kwargs: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge ``ClientParams`` with keyword arguments (kwargs win).

        ``None`` values never override; ``headers`` are shallow-merged.
        """
        merged: Dict[str, Any] = params.overrides() if params is not None else {}
        for key, value in kwargs.items():
            if value is None:
                continue
            if key == "headers" and "headers" in merged:
                merged["headers"] = {**merged["headers"], **value}
            else:
                merged[key] = value
        return merged

    @classmethod
    def create(cls, provider: str, *, params: Optional[ClientParams] = None, **kwargs: Any) -> Any:
        """Create a configured adapter instance.

        Raises
        ------
        UnknownProviderError
            Unknown provider, missing adapter class or invalid arguments.
        ConfigurationError
            No API key could be resolved.
        """
        klass = cls.adapter_class(provider)
        name = provider.lower().strip()
        overrides = cls._coerce_params(params, kwargs)
        cfg = get_provider_config(name, overrides)
        ctor_kwargs = {k: v for k, v in cfg.items() if k in klass.config_keys}
        try:
            return klass(**ctor_kwargs)
        except ClientError:
            raise
        except (TypeError, ValueError) as exc:
            raise UnknownProviderError(f"Invalid arguments for '{provider}' adapter constructor: {exc}") from exc


def create_adapter(provider: str, params: Optional[ClientParams] = None, **kwargs: Any) -> Any:
    """Thin helper delegating to :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(provider, params=params, **kwargs)


def create_client(
    provider: Optional[str] = None,
    *,
    params: Optional[ClientParams] = None,
    transport: Optional[Transport] = None,
    **kwargs: Any,
):
    """Build an :class:`~ai_client.client.AIClient` for ``provider``.

    Parameters
    ----------
    provider:
        Canonical provider name; falls back to ``params.provider``.
    params:
        Optional typed :class:`ClientParams`.
    transport:
        Transport override (tests, custom HTTP stacks). When omitted an
        ``HttpxTransport`` is created; ``timeout_seconds`` (from ``params`` or
        kwargs) replaces its read timeouts.
    **kwargs:
        Adapter settings such as ``api_key``, ``model`` or ``base_url``.

    Example
    -------
    >>> client = create_client("openai", api_key="sk-...", model="gpt-4o-mini")  # doctest: +SKIP
    """
    from ..client import AIClient

    name = provider or (params.provider if params is not None else None)
    if not name:
        raise ConfigurationError(
            code=ErrorCode.VALIDATION,
            message="no provider given",
            setting="provider",
        )
    timeout = kwargs.pop("timeout_seconds", None)
    if timeout is None and params is not None:
        timeout = params.timeout_seconds
    adapter = ProviderFactory.create(name, params=params, **kwargs)
    if transport is None:
        timeouts = None
        if timeout is not None:
            base = get_timeout_config()
            timeouts = TimeoutConfig(
                connect_timeout_seconds=base.connect_timeout_seconds,
                http_timeout_seconds=float(timeout),
                stream_timeout_seconds=float(timeout),
            )
        transport = HttpxTransport(purpose=adapter.provider_name, timeouts=timeouts)
    return AIClient(adapter, transport)


__all__ = ["ProviderFactory", "UnknownProviderError", "create_adapter", "create_client"]
