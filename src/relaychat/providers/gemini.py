"""Google Gemini generateContent backend.

Auth goes in the `key` query parameter rather than a header, and
assistant turns are called "model" on the wire.
"""

from typing import Any, Sequence

from relaychat.messages import Message, NormalizedResponse, Role, Usage
from relaychat.providers.base import Provider, ProviderAdapter, WireRequest

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GEMINI_MAX_OUTPUT_TOKENS = 8192


def build_request(
    messages: Sequence[Message], model: str, api_key: str, max_tokens: int,
) -> WireRequest:
    system_parts = [m.content for m in messages if m.role == Role.SYSTEM]
    contents = [
        {
            "role": "model" if m.role == Role.ASSISTANT else "user",
            "parts": [{"text": m.content}],
        }
        for m in messages
        if m.role != Role.SYSTEM
    ]

    body: dict[str, Any] = {
        "contents": contents,
        "generationConfig": {
            "maxOutputTokens": min(max_tokens, GEMINI_MAX_OUTPUT_TOKENS),
        },
    }
    if system_parts:
        body["systemInstruction"] = {
            "parts": [{"text": text} for text in system_parts],
        }

    return WireRequest(
        url=GEMINI_URL.format(model=model),
        json=body,
        headers={"Content-Type": "application/json"},
        params={"key": api_key},
    )


def parse_response(payload: dict[str, Any], model: str) -> NormalizedResponse:
    parts = payload["candidates"][0]["content"]["parts"]
    if not parts:
        raise ValueError("candidate has no parts")
    text = "".join(p["text"] for p in parts if "text" in p)

    meta = payload.get("usageMetadata") or {}
    return NormalizedResponse(
        content=text,
        usage=Usage(
            prompt_tokens=int(meta.get("promptTokenCount") or 0),
            completion_tokens=int(meta.get("candidatesTokenCount") or 0),
        ),
        model=payload.get("modelVersion") or model,
        raw=payload,
    )


GEMINI = ProviderAdapter(
    provider=Provider.GEMINI,
    display_name="Gemini",
    build_request=build_request,
    parse_response=parse_response,
)
