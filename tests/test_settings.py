"""Tests for environment-driven settings and the shared client factory."""

from __future__ import annotations

import pytest

from fbmessenger.outbound import factory
from fbmessenger.outbound.graph import GraphApiClient
from fbmessenger.outbound.settings import GraphApiSettings, load_graph_settings


def test_load_graph_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FACEBOOK_PAGE_TOKEN", " token ")
    monkeypatch.setenv("FACEBOOK_API_VERSION", "v3.0")
    monkeypatch.delenv("FACEBOOK_GRAPH_URL", raising=False)
    monkeypatch.setenv("FACEBOOK_HTTP_TIMEOUT", "5")

    settings = load_graph_settings()

    assert settings == GraphApiSettings(access_token="token", api_version="v3.0", timeout=5.0)
    assert settings.endpoint_url("me/messages") == "https://graph.facebook.com/v3.0/me/messages"
    assert settings.batch_url == "https://graph.facebook.com/"


def test_missing_token_names_the_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FACEBOOK_PAGE_TOKEN", raising=False)

    with pytest.raises(RuntimeError, match="FACEBOOK_PAGE_TOKEN"):
        load_graph_settings()


def test_graph_client_is_shared(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FACEBOOK_PAGE_TOKEN", "token")
    factory.reset_graph_client()
    try:
        first = factory.get_graph_client()
        assert isinstance(first, GraphApiClient)
        assert not first.batch
        assert factory.get_graph_client() is first
    finally:
        factory.reset_graph_client()
