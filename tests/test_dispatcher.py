"""Tests for routing + dispatch, including the single fallback retry."""

import asyncio

import httpx
import pytest

from conftest import StubBackend, claude_payload, conversation, openai_payload
from relaychat.config import ProviderConfig, Settings
from relaychat.context import DEFAULT_SYSTEM_PROMPT
from relaychat.dispatcher import Dispatcher
from relaychat.errors import (
    CredentialMissing,
    EmptyProviderSet,
    UpstreamError,
    UpstreamMalformed,
)
from relaychat.messages import Message
from relaychat.providers.base import Provider


def dispatch(store, backend, messages, settings=None, **kwargs):
    async def run():
        async with backend.client() as client:
            dispatcher = Dispatcher(store, settings, client=client)
            return await dispatcher.dispatch(messages, **kwargs)
    return asyncio.run(run())


def failing(status=500, message="overloaded"):
    return httpx.Response(status, json={"error": {"message": message}})


class TestDispatch:

    def test_routes_and_returns_normalized_response(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        store.set(Provider.CLAUDE, "sk-claude")
        backend = StubBackend({"api.openai.com": httpx.Response(200, json=openai_payload("Hi!"))})

        result = dispatch(store, backend, [Message.user("hello")])

        assert result.provider == Provider.OPENAI
        assert result.reason == "Initial conversation"
        assert result.response.content == "Hi!"
        assert result.model == "gpt-4o"
        assert not result.used_fallback
        assert len(backend.requests) == 1
        assert backend.requests[0].headers["authorization"] == "Bearer sk-openai"

    def test_available_defaults_to_configured_credentials(self, store):
        store.set(Provider.CLAUDE, "sk-claude")
        backend = StubBackend({"api.anthropic.com": httpx.Response(200, json=claude_payload())})

        result = dispatch(store, backend, [Message.user("hello")])

        assert result.provider == Provider.CLAUDE
        assert backend.requests[0].headers["x-api-key"] == "sk-claude"

    def test_explicit_available_narrows_choice(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        store.set(Provider.CLAUDE, "sk-claude")
        backend = StubBackend({"api.anthropic.com": httpx.Response(200, json=claude_payload())})

        result = dispatch(store, backend, [Message.user("hello")], available={Provider.CLAUDE})

        assert result.provider == Provider.CLAUDE

    def test_no_credentials_raises_before_any_call(self, store):
        backend = StubBackend()
        with pytest.raises(EmptyProviderSet):
            dispatch(store, backend, [Message.user("hello")])
        assert backend.requests == []

    def test_available_provider_without_key(self, store):
        backend = StubBackend()
        with pytest.raises(CredentialMissing):
            dispatch(store, backend, [Message.user("hello")], available={Provider.GROQ})
        assert backend.requests == []

    def test_outbound_context_has_system_prompt_and_window(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        backend = StubBackend({"api.openai.com": httpx.Response(200, json=openai_payload())})
        history = conversation(*[f"turn {i}" for i in range(15)])

        dispatch(store, backend, history)

        sent = backend.body()["messages"]
        assert len(sent) == 11
        assert sent[0] == {"role": "system", "content": DEFAULT_SYSTEM_PROMPT}
        assert sent[-1]["content"] == "turn 14"
        assert sent[1]["content"] == "turn 5"

    def test_conversation_is_not_mutated(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        backend = StubBackend({"api.openai.com": httpx.Response(200, json=openai_payload())})
        history = conversation("hi", "hello", "more")
        before = list(history)

        dispatch(store, backend, history)

        assert history == before


class TestModelSelection:

    def test_hint_for_other_provider_is_ignored(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        backend = StubBackend({"api.openai.com": httpx.Response(200, json=openai_payload())})

        result = dispatch(store, backend, [Message.user("hi")], model_hint="claude3")

        assert result.model == "gpt-4o"
        assert backend.body()["model"] == "gpt-4o"

    def test_hint_for_selected_provider_is_used(self, store):
        store.set(Provider.CLAUDE, "sk-claude")
        backend = StubBackend({"api.anthropic.com": httpx.Response(200, json=claude_payload())})

        result = dispatch(store, backend, [Message.user("hi")], model_hint="claude3")

        assert backend.body()["model"] == "claude-3-opus-20240229"
        assert result.model == "claude-3-opus-20240229"

    def test_configured_override(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        backend = StubBackend({"api.openai.com": httpx.Response(200, json=openai_payload())})
        settings = Settings(providers={Provider.OPENAI: ProviderConfig(model="gpt-4o-mini")})

        dispatch(store, backend, [Message.user("hi")], settings=settings)

        assert backend.body()["model"] == "gpt-4o-mini"


class TestFailureHandling:

    def test_upstream_error_surfaces_without_retry(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        store.set(Provider.GROQ, "gsk-groq")
        backend = StubBackend({"api.openai.com": failing(503, "overloaded")})

        with pytest.raises(UpstreamError) as exc:
            dispatch(store, backend, [Message.user("hi")])

        assert exc.value.status == 503
        assert exc.value.message == "overloaded"
        assert len(backend.requests) == 1

    def test_fallback_retries_once_with_secondary(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        store.set(Provider.GROQ, "gsk-groq")
        backend = StubBackend({
            "api.openai.com": failing(),
            "api.groq.com": httpx.Response(200, json=openai_payload("from groq")),
        })
        settings = Settings(fallback_provider=Provider.GROQ)

        result = dispatch(store, backend, [Message.user("hi")], settings=settings)

        assert result.provider == Provider.GROQ
        assert result.used_fallback
        assert result.response.content == "from groq"
        assert [r.url.host for r in backend.requests] == ["api.openai.com", "api.groq.com"]

    def test_fallback_error_is_final(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        store.set(Provider.GROQ, "gsk-groq")
        backend = StubBackend({
            "api.openai.com": failing(500, "primary down"),
            "api.groq.com": failing(429, "rate limited"),
        })
        settings = Settings(fallback_provider=Provider.GROQ)

        with pytest.raises(UpstreamError) as exc:
            dispatch(store, backend, [Message.user("hi")], settings=settings)

        assert exc.value.provider == "groq"
        assert exc.value.status == 429
        assert len(backend.requests) == 2

    def test_no_retry_when_fallback_is_the_failing_provider(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        backend = StubBackend({"api.openai.com": failing()})
        settings = Settings(fallback_provider=Provider.OPENAI)

        with pytest.raises(UpstreamError):
            dispatch(store, backend, [Message.user("hi")], settings=settings)
        assert len(backend.requests) == 1

    def test_no_retry_when_fallback_has_no_key(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        backend = StubBackend({"api.openai.com": failing()})
        settings = Settings(fallback_provider=Provider.GROQ)

        with pytest.raises(UpstreamError):
            dispatch(store, backend, [Message.user("hi")], settings=settings)
        assert len(backend.requests) == 1

    def test_malformed_response_is_not_retried(self, store):
        store.set(Provider.OPENAI, "sk-openai")
        store.set(Provider.GROQ, "gsk-groq")
        backend = StubBackend({"api.openai.com": httpx.Response(200, json={})})
        settings = Settings(fallback_provider=Provider.GROQ)

        with pytest.raises(UpstreamMalformed):
            dispatch(store, backend, [Message.user("hi")], settings=settings)
        assert len(backend.requests) == 1


class TestRouteOnly:

    def test_route_uses_store(self, store):
        store.set(Provider.DEEPSEEK, "sk-ds")
        decision = Dispatcher(store).route([Message.user("hi")])
        assert decision.provider == Provider.DEEPSEEK
