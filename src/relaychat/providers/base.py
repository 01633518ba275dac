"""Shared provider identity and the adapter record every backend fills in.

An adapter is data, not a subclass: a ProviderAdapter bundles the
backend's endpoint with two pure functions (request builder and
response parser). send_with() is the single place that touches the
network, so every backend gets the same timeout, error mapping and
logging.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Sequence

import httpx

from relaychat.errors import CredentialMissing, UpstreamError, UpstreamMalformed
from relaychat.messages import Message, NormalizedResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_TOKENS = 4000


class Provider(str, Enum):
    """The closed set of supported backends."""
    GROQ = "groq"
    OPENAI = "openai"
    CLAUDE = "claude"
    DEEPSEEK = "deepseek"
    GEMINI = "gemini"


@dataclass(frozen=True)
class WireRequest:
    """Everything needed for one outbound HTTP call."""
    url: str
    json: dict[str, Any]
    headers: dict[str, str]
    params: dict[str, str] | None = None


# (messages, model, api_key, max_tokens) -> WireRequest
RequestBuilder = Callable[[Sequence[Message], str, str, int], WireRequest]
# (decoded json body, model) -> NormalizedResponse
ResponseParser = Callable[[dict[str, Any], str], NormalizedResponse]


@dataclass(frozen=True)
class ProviderAdapter:
    """One backend's request/response translation."""
    provider: Provider
    display_name: str
    build_request: RequestBuilder
    parse_response: ResponseParser


def _error_message(response: httpx.Response, display_name: str) -> str:
    """Pull the backend's error text out of a failed response."""
    fallback = f"An error occurred with the {display_name} API"
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or fallback
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return fallback


async def send_with(
    adapter: ProviderAdapter,
    conversation: Sequence[Message],
    model: str,
    api_key: str,
    *,
    client: httpx.AsyncClient | None = None,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    timeout: float = DEFAULT_TIMEOUT,
) -> NormalizedResponse:
    """Send a conversation through one adapter and normalize the reply.

    Args:
        adapter: The backend to call.
        conversation: Messages to send, already windowed by the caller.
        model: Wire model identifier.
        api_key: Credential read from the store at call time.
        client: Optional shared client (tests inject a MockTransport).
        max_tokens: Completion token cap for backends that take one.
        timeout: Seconds before the call is abandoned.

    Raises:
        CredentialMissing: api_key is empty.
        UpstreamError: non-2xx status, or the request did not complete.
        UpstreamMalformed: 2xx body that does not parse.
    """
    name = adapter.provider.value
    if not api_key:
        raise CredentialMissing(name)

    wire = adapter.build_request(conversation, model, api_key, max_tokens)

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=timeout)
    try:
        resp = await http.post(
            wire.url,
            json=wire.json,
            headers=wire.headers,
            params=wire.params,
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        logger.error(f"{adapter.display_name} request failed: {e}")
        raise UpstreamError(name, None, str(e) or type(e).__name__) from e
    finally:
        if owns_client:
            await http.aclose()

    if not resp.is_success:
        message = _error_message(resp, adapter.display_name)
        logger.error(f"{adapter.display_name} API error ({resp.status_code}): {message}")
        raise UpstreamError(name, resp.status_code, message)

    try:
        payload = resp.json()
    except ValueError as e:
        raise UpstreamMalformed(name, "response body is not JSON") from e

    if not isinstance(payload, dict):
        raise UpstreamMalformed(name, "response body is not an object")

    try:
        return adapter.parse_response(payload, model)
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        raise UpstreamMalformed(name, f"{type(e).__name__}: {e}") from e
