"""OpenAI-shaped chat completion backends: Groq, OpenAI and DeepSeek.

All three speak the same wire format (bearer auth, role/content
message array, choices[0].message, usage.prompt_tokens). They differ
only in endpoint and in whether max_tokens is sent.
"""

from typing import Any, Sequence

from relaychat.messages import Message, NormalizedResponse, Usage
from relaychat.providers.base import Provider, ProviderAdapter, WireRequest

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"
DEEPSEEK_URL = "https://api.deepseek.com/v1/chat/completions"


def _bearer(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def _request_builder(url: str, send_max_tokens: bool):
    def build(
        messages: Sequence[Message], model: str, api_key: str, max_tokens: int,
    ) -> WireRequest:
        body: dict[str, Any] = {
            "model": model,
            "messages": [m.to_wire() for m in messages],
        }
        if send_max_tokens:
            body["max_tokens"] = max_tokens
        return WireRequest(url=url, json=body, headers=_bearer(api_key))

    return build


def parse_chat_completion(payload: dict[str, Any], model: str) -> NormalizedResponse:
    """Map a chat.completion object to the normalized shape."""
    content = payload["choices"][0]["message"]["content"]
    if not isinstance(content, str):
        raise ValueError("choices[0].message.content is not text")

    usage = payload.get("usage") or {}
    return NormalizedResponse(
        content=content,
        usage=Usage(
            prompt_tokens=int(usage.get("prompt_tokens") or 0),
            completion_tokens=int(usage.get("completion_tokens") or 0),
        ),
        model=payload.get("model") or model,
        raw=payload,
    )


GROQ = ProviderAdapter(
    provider=Provider.GROQ,
    display_name="Groq",
    build_request=_request_builder(GROQ_URL, send_max_tokens=False),
    parse_response=parse_chat_completion,
)

OPENAI = ProviderAdapter(
    provider=Provider.OPENAI,
    display_name="OpenAI",
    build_request=_request_builder(OPENAI_URL, send_max_tokens=True),
    parse_response=parse_chat_completion,
)

DEEPSEEK = ProviderAdapter(
    provider=Provider.DEEPSEEK,
    display_name="DeepSeek",
    build_request=_request_builder(DEEPSEEK_URL, send_max_tokens=False),
    parse_response=parse_chat_completion,
)
