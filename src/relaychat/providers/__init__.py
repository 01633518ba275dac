"""Backend adapters, one per Provider.

Usage:
    from relaychat.providers import Provider, send
    response = await send(Provider.CLAUDE, messages, "claude-3-opus-20240229", api_key)
"""

from typing import Sequence

import httpx

from relaychat.messages import Message, NormalizedResponse
from relaychat.providers.anthropic import CLAUDE
from relaychat.providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TIMEOUT,
    Provider,
    ProviderAdapter,
    WireRequest,
    send_with,
)
from relaychat.providers.gemini import GEMINI
from relaychat.providers.openai_compat import DEEPSEEK, GROQ, OPENAI

ADAPTERS: dict[Provider, ProviderAdapter] = {
    Provider.GROQ: GROQ,
    Provider.OPENAI: OPENAI,
    Provider.CLAUDE: CLAUDE,
    Provider.DEEPSEEK: DEEPSEEK,
    Provider.GEMINI: GEMINI,
}


def get_adapter(provider: Provider | str) -> ProviderAdapter:
    """Look up the adapter for a provider tag."""
    return ADAPTERS[Provider(provider)]


async def send(
    provider: Provider | str,
    conversation: Sequence[Message],
    model: str,
    api_key: str,
    *,
    client: httpx.AsyncClient | None = None,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    timeout: float = DEFAULT_TIMEOUT,
) -> NormalizedResponse:
    """Send a conversation to the given backend."""
    return await send_with(
        get_adapter(provider),
        conversation,
        model,
        api_key,
        client=client,
        max_tokens=max_tokens,
        timeout=timeout,
    )


__all__ = [
    "ADAPTERS",
    "Provider",
    "ProviderAdapter",
    "WireRequest",
    "get_adapter",
    "send",
    "send_with",
]
