from __future__ import annotations

import pytest

from ai_client import AIClient, create_client
from ai_client.base.dto import ClientParams
from ai_client.base.errors import ConfigurationError, ErrorCode
from ai_client.base.factory import ProviderFactory, UnknownProviderError, create_adapter
from ai_client.base.http import HttpxTransport
from ai_client.gemini import GeminiAdapter
from ai_client.openai import OpenAIAdapter


def test_factory_unknown_provider():
    with pytest.raises(UnknownProviderError):
        ProviderFactory.create("nope", api_key="k")


def test_factory_import_failure(monkeypatch):
    # Register a bogus provider to hit the import error path
    monkeypatch.setattr(
        ProviderFactory,
        "_PROVIDERS",
        {"bogus": {"module": "does.not.exist", "class": "X"}},
        raising=False,
    )
    with pytest.raises(UnknownProviderError):
        ProviderFactory.create("bogus")


def test_factory_missing_class(monkeypatch):
    monkeypatch.setattr(
        ProviderFactory,
        "_PROVIDERS",
        {"gemini": {"module": "ai_client.gemini.adapter", "class": "Nope"}},
        raising=False,
    )
    with pytest.raises(UnknownProviderError):
        ProviderFactory.create("gemini", api_key="k")


def test_supported_providers():
    assert ProviderFactory.supported() == ("gemini", "openai")


def test_missing_api_key_is_configuration_error():
    with pytest.raises(ConfigurationError) as info:
        ProviderFactory.create("openai")
    assert info.value.code is ErrorCode.AUTH
    assert info.value.setting == "api_key"


def test_key_from_environment_and_kwargs_precedence(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-env")
    adapter = create_adapter("OpenAI", model="gpt-4o-mini", organization="org")
    assert isinstance(adapter, OpenAIAdapter)
    assert adapter.default_model == "gpt-4o-mini"
    assert adapter.auth_headers() == {"Authorization": "Bearer env-key", "OpenAI-Organization": "org"}


def test_params_merge_with_kwargs():
    params = ClientParams(api_key="p-key", model="gemini-2.5-flash", headers={"X-A": "1"}, auth_mode="query")
    adapter = ProviderFactory.create("gemini", params=params, headers={"X-B": "2"})
    assert isinstance(adapter, GeminiAdapter)
    assert adapter.default_model == "gemini-2.5-flash"
    req = adapter.build_list_models_request()
    assert req.params["key"] == "p-key"
    assert req.headers["X-A"] == "1" and req.headers["X-B"] == "2"


def test_invalid_auth_mode_from_env(monkeypatch):
    monkeypatch.setenv("GEMINI_AUTH_MODE", "cookie")
    with pytest.raises(UnknownProviderError):
        ProviderFactory.create("gemini", api_key="k")


def test_openai_api_mode_from_env_and_params(monkeypatch):
    assert ProviderFactory.create("openai", api_key="k").api == "chat"
    monkeypatch.setenv("OPENAI_API", "responses")
    assert ProviderFactory.create("openai", api_key="k").api == "responses"
    params = ClientParams(api_key="k", api="chat")
    assert ProviderFactory.create("openai", params=params).api == "chat"
    with pytest.raises(ValueError):
        ClientParams(api="assistants")


def test_create_client_builds_httpx_transport_with_timeout():
    client = create_client("gemini", api_key="k", timeout_seconds=3)
    assert isinstance(client, AIClient)
    assert client.provider_name == "gemini"
    assert client.default_model == "gemini-2.5-pro"
    assert isinstance(client.transport, HttpxTransport)
    timeout = client.transport._timeout(streaming=True)  # type: ignore[attr-defined]
    assert timeout.read == 3.0
    assert client.supports_streaming()


def test_create_client_uses_params_provider(fake_transport):
    client = create_client(params=ClientParams(provider="openai", api_key="k"), transport=fake_transport)
    assert client.provider_name == "openai"
    assert client.transport is fake_transport


def test_create_client_without_provider():
    with pytest.raises(ConfigurationError):
        create_client(api_key="k")
