"""Shared fixtures: isolated config dir, no real keys, stubbed HTTP."""

import json

import httpx
import pytest

from relaychat.credentials import ENV_VARS, CredentialStore
from relaychat.messages import Message


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from ~/.relaychat and any real API keys."""
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / "home"
    monkeypatch.setenv("RELAYCHAT_HOME", str(home))
    return home


@pytest.fixture
def store(tmp_path):
    """File-backed credential store that ignores environment variables."""
    return CredentialStore(path=tmp_path / "creds.yaml", use_env=False)


class StubBackend:
    """Records outbound requests and answers from a per-host table."""

    def __init__(self, responses: dict[str, httpx.Response] | None = None):
        self.responses = responses or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses[request.url.host]

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def backend():
    return StubBackend()


def openai_payload(content="Hello!", prompt=10, completion=5, model="gpt-4o"):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "logprobs": None,
            "finish_reason": "stop",
        }],
        "usage": {
            "prompt_tokens": prompt,
            "completion_tokens": completion,
            "total_tokens": prompt + completion,
        },
    }


def claude_payload(content="Hello from Claude", input_tokens=12, output_tokens=7):
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-opus-20240229",
        "content": [{"type": "text", "text": content}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


def gemini_payload(content="Hello from Gemini", prompt=9, candidates=4):
    return {
        "candidates": [{
            "content": {"role": "model", "parts": [{"text": content}]},
            "finishReason": "STOP",
        }],
        "usageMetadata": {
            "promptTokenCount": prompt,
            "candidatesTokenCount": candidates,
            "totalTokenCount": prompt + candidates,
        },
    }


def conversation(*turns: str) -> list[Message]:
    """Alternate user/assistant turns, starting with the user."""
    messages = []
    for i, text in enumerate(turns):
        if i % 2 == 0:
            messages.append(Message.user(text))
        else:
            messages.append(Message.assistant(text))
    return messages
