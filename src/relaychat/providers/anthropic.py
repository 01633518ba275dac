"""Anthropic Messages API backend."""

from typing import Any, Sequence

from relaychat.messages import Message, NormalizedResponse, Role, Usage
from relaychat.providers.base import Provider, ProviderAdapter, WireRequest

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


def build_request(
    messages: Sequence[Message], model: str, api_key: str, max_tokens: int,
) -> WireRequest:
    # System prompts are a top-level field; the messages array only
    # accepts user/assistant turns.
    system_parts = [m.content for m in messages if m.role == Role.SYSTEM]
    converted = [
        {
            "role": "assistant" if m.role == Role.ASSISTANT else "user",
            "content": m.content,
        }
        for m in messages
        if m.role != Role.SYSTEM
    ]

    body: dict[str, Any] = {
        "model": model,
        "max_tokens": max_tokens,
        "messages": converted,
    }
    if system_parts:
        body["system"] = "\n\n".join(system_parts)

    return WireRequest(
        url=ANTHROPIC_URL,
        json=body,
        headers={
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        },
    )


def parse_response(payload: dict[str, Any], model: str) -> NormalizedResponse:
    blocks = payload["content"]
    texts = [b["text"] for b in blocks if b.get("type", "text") == "text"]
    if not texts:
        raise ValueError("no text content blocks")

    usage = payload.get("usage") or {}
    return NormalizedResponse(
        content="".join(texts),
        usage=Usage(
            prompt_tokens=int(usage.get("input_tokens") or 0),
            completion_tokens=int(usage.get("output_tokens") or 0),
        ),
        model=payload.get("model") or model,
        raw=payload,
    )


CLAUDE = ProviderAdapter(
    provider=Provider.CLAUDE,
    display_name="Claude",
    build_request=build_request,
    parse_response=parse_response,
)
