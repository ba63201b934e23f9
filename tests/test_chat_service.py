from __future__ import annotations

import pytest

from conftest import FakeProvider, FakeStore, make_settings
from services.chat_service import ChatService
from services.errors import DataFetchError, ProviderError


def _service(store=None, anthropic_outcomes=None, openai_outcomes=None, providers=None):
    settings = make_settings()
    store = store or FakeStore(rows=[{"first_name": "Ada", "last_name": "L", "company": "Acme"}])
    if providers is None:
        providers = {
            "anthropic": FakeProvider("anthropic", anthropic_outcomes),
            "openai": FakeProvider("openai", openai_outcomes),
        }
    svc = ChatService(
        settings,
        store,
        providers,
        preferred_provider="anthropic",
        fallback_provider="openai",
        max_tokens=300,
        temperature=0.7,
    )
    return svc, store, providers


def test_primary_success_skips_fallback():
    svc, store, providers = _service(anthropic_outcomes=["You know Ada at Acme."])
    result = svc.handle("who do I know?", "good-token")
    assert result.ok
    assert result.response == "You know Ada at Acme."
    assert result.provider == "anthropic"
    assert len(providers["anthropic"].calls) == 1
    assert providers["openai"].calls == []
    assert store.closed == 1


def test_request_carries_summary_query_and_limits():
    svc, _, providers = _service(anthropic_outcomes=["ok"])
    svc.handle("what are my top companies?", "good-token")
    call = providers["anthropic"].calls[0]
    assert "Nubble Assistant" in call["system_prompt"]
    assert "Top companies: Acme (1)" in call["system_prompt"]
    assert call["user_message"] == "what are my top companies?"
    assert call["max_tokens"] == 300
    assert call["temperature"] == 0.7


@pytest.mark.parametrize("reason", [ProviderError.APPLICATION, ProviderError.EMPTY, ProviderError.HTTP, ProviderError.TRANSPORT])
def test_primary_failure_falls_back_exactly_once(reason):
    svc, _, providers = _service(
        anthropic_outcomes=[ProviderError("anthropic", reason, details="boom")],
        openai_outcomes=["fallback answer"],
    )
    result = svc.handle("hi", "good-token")
    assert result.ok
    assert result.response == "fallback answer"
    assert result.provider == "openai"
    assert len(providers["anthropic"].calls) == 1
    assert len(providers["openai"].calls) == 1
    # Same prompt and query are reused for the fallback hop
    assert providers["openai"].calls[0]["system_prompt"] == providers["anthropic"].calls[0]["system_prompt"]


def test_both_providers_fail_without_third_attempt():
    svc, _, providers = _service(
        anthropic_outcomes=[ProviderError("anthropic", ProviderError.APPLICATION, details="overloaded")],
        openai_outcomes=[ProviderError("openai", ProviderError.EMPTY, details="empty response")],
    )
    result = svc.handle("hi", "good-token")
    assert not result.ok
    assert result.kind == "all_providers_failed"
    assert result.status_code == 503
    assert "try again later" in result.error
    assert "overloaded" in result.details and "empty response" in result.details
    assert len(providers["anthropic"].calls) == 1
    assert len(providers["openai"].calls) == 1


def test_fallback_provider_as_primary_does_not_chain():
    svc, _, providers = _service(openai_outcomes=[ProviderError("openai", ProviderError.HTTP, status=500)])
    result = svc.handle("hi", "good-token", primary_provider="openai")
    assert result.kind == "provider_error"
    assert result.status_code == 502
    assert providers["anthropic"].calls == []
    assert len(providers["openai"].calls) == 1


def test_no_fallback_when_fallback_provider_unconfigured():
    anthropic = FakeProvider("anthropic", [ProviderError("anthropic", ProviderError.EMPTY)])
    svc, _, _ = _service(providers={"anthropic": anthropic})
    result = svc.handle("hi", "good-token")
    assert result.kind == "provider_error"
    assert len(anthropic.calls) == 1


@pytest.mark.parametrize("query,token", [("", "good-token"), ("   ", "good-token"), ("hi", ""), ("", "")])
def test_validation_short_circuit(query, token):
    svc, store, providers = _service()
    result = svc.handle(query, token)
    assert result.kind == "bad_request"
    assert result.status_code == 400
    assert store.open_calls == 0
    assert store.fetch_calls == 0
    assert providers["anthropic"].calls == [] and providers["openai"].calls == []


def test_auth_short_circuit():
    svc, store, providers = _service()
    result = svc.handle("hi", "expired-token")
    assert result.kind == "auth_error"
    assert result.status_code == 401
    assert store.open_calls == 1
    assert store.fetch_calls == 0
    assert providers["anthropic"].calls == [] and providers["openai"].calls == []


def test_data_fetch_error_is_terminal():
    store = FakeStore(fetch_error=DataFetchError("Failed to fetch user connections", details="relation missing"))
    svc, _, providers = _service(store=store)
    result = svc.handle("hi", "good-token")
    assert result.kind == "data_fetch_error"
    assert result.status_code == 500
    assert result.error == "Failed to fetch user connections"
    assert providers["anthropic"].calls == [] and providers["openai"].calls == []
    assert store.closed == 1


def test_unexpected_store_exception_becomes_data_fetch_error():
    svc, _, providers = _service(store=FakeStore(fetch_error=RuntimeError("socket closed")))
    result = svc.handle("hi", "good-token")
    assert result.kind == "data_fetch_error"
    assert result.details == "socket closed"
    assert providers["anthropic"].calls == []


def test_pinned_provider_without_key_is_config_error_before_io():
    # e.g. /chatbot pins openai while only the anthropic key is configured
    store = FakeStore()
    svc, _, _ = _service(store=store, providers={"anthropic": FakeProvider("anthropic", ["x"])})
    result = svc.handle("hi", "good-token", primary_provider="openai")
    assert result.kind == "config_error"
    assert result.status_code == 500
    assert store.open_calls == 0


def test_empty_network_still_reaches_provider():
    svc, _, providers = _service(store=FakeStore(rows=[]), anthropic_outcomes=["You have no connections yet."])
    result = svc.handle("how many connections?", "good-token")
    assert result.response == "You have no connections yet."
    assert "No connection data available." in providers["anthropic"].calls[0]["system_prompt"]


def test_unexpected_provider_exception_is_contained():
    svc, _, _ = _service(anthropic_outcomes=[ValueError("bad sdk state")])
    result = svc.handle("hi", "good-token")
    assert not result.ok
    assert result.status_code == 500
    assert result.kind == "internal_error"


def test_end_to_end_top_companies_scenario():
    rows = [{"company": "Acme"}, {"company": "Acme"}, {"company": "Globex"}]
    answer = "Your top companies are Acme and Globex."
    svc, _, providers = _service(store=FakeStore(rows=rows), anthropic_outcomes=[answer])
    result = svc.handle("what are my top companies?", "good-token")
    prompt = providers["anthropic"].calls[0]["system_prompt"]
    assert prompt.index("Acme (2)") < prompt.index("Globex (1)")
    assert providers["anthropic"].calls[0]["user_message"] == "what are my top companies?"
    assert result.response == answer


def test_unknown_provider_is_bad_request_before_io():
    svc, store, providers = _service()
    result = svc.handle("hi", "good-token", primary_provider="gemini")
    assert result.kind == "bad_request"
    assert result.status_code == 400
    assert "gemini" in result.details
    assert store.open_calls == 0
    assert providers["anthropic"].calls == [] and providers["openai"].calls == []


def test_provider_names_are_case_insensitive():
    providers = {
        "anthropic": FakeProvider("anthropic", [ProviderError("anthropic", ProviderError.EMPTY)]),
        "openai": FakeProvider("openai", ["fallback answer"]),
    }
    svc = ChatService(
        make_settings(),
        FakeStore(),
        providers,
        preferred_provider="Anthropic",
        fallback_provider="OpenAI",
    )
    result = svc.handle("hi", "good-token", primary_provider="ANTHROPIC")
    assert result.response == "fallback answer"
    assert len(providers["openai"].calls) == 1
