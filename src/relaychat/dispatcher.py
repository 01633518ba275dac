"""Routes a conversation and calls the chosen backend.

One dispatch is one outbound call: route, resolve the model, window
the context, send. Adapter failures reach the caller unchanged. The
only exception is the optional single fallback retry configured via
Settings.fallback_provider, kept from the original two-provider setup.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import httpx

from relaychat.config import Settings
from relaychat.context import build_context
from relaychat.credentials import CredentialStore
from relaychat.errors import UpstreamError
from relaychat.messages import Message, NormalizedResponse
from relaychat.models import ModelOption, resolve_model
from relaychat.providers import send
from relaychat.providers.base import Provider
from relaychat.routing.policy import RoutingDecision, RoutingPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    """Which provider answered, why it was chosen, and its reply."""
    provider: Provider
    reason: str
    response: NormalizedResponse
    model: str = ""
    used_fallback: bool = False


class Dispatcher:
    """Entry point for sending a conversation to the best backend.

    Usage:
        dispatcher = Dispatcher(CredentialStore(), load_settings())
        result = await dispatcher.dispatch([Message.user("hi")])
        print(result.provider, result.reason, result.response.content)
    """

    def __init__(
        self,
        credentials: CredentialStore,
        settings: Settings | None = None,
        policy: RoutingPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.credentials = credentials
        self.settings = settings or Settings()
        self.policy = policy or RoutingPolicy()
        self._client = client

    def route(
        self,
        conversation: Sequence[Message],
        available: Iterable[Provider] | None = None,
    ) -> RoutingDecision:
        """Routing decision only, without calling a backend."""
        if available is None:
            available = self.credentials.available()
        return self.policy.select_provider(conversation, available)

    async def dispatch(
        self,
        conversation: Sequence[Message],
        available: Iterable[Provider] | None = None,
        model_hint: ModelOption | str | None = None,
    ) -> DispatchResult:
        """Route the conversation and send it to the selected provider.

        Args:
            conversation: Ordered history ending with the new user message.
            available: Providers to choose from; defaults to the ones
                with credentials right now.
            model_hint: Preferred model; used only if it belongs to
                the selected provider.

        Raises:
            EmptyProviderSet: no provider is available.
            CredentialMissing: `available` named a provider without a key.
            UpstreamError / UpstreamMalformed: the backend call failed.
        """
        if available is None:
            available = self.credentials.available()
        available = frozenset(Provider(p) for p in available)

        try:
            return await self._dispatch_once(conversation, available, model_hint)
        except UpstreamError as e:
            fallback = self.settings.fallback_provider
            if (
                fallback is None
                or fallback == Provider(e.provider)
                or fallback not in available
            ):
                raise
            logger.warning(f"{e.provider} failed, retrying once with {fallback.value}: {e}")

        result = await self._dispatch_once(conversation, frozenset({fallback}), model_hint)
        return DispatchResult(
            provider=result.provider,
            reason=result.reason,
            response=result.response,
            model=result.model,
            used_fallback=True,
        )

    async def _dispatch_once(
        self,
        conversation: Sequence[Message],
        available: frozenset[Provider],
        model_hint: ModelOption | str | None,
    ) -> DispatchResult:
        decision = self.policy.select_provider(conversation, available)
        model = resolve_model(
            decision.provider, model_hint, self.settings.model_overrides())
        logger.info(
            f"Routing to {decision.provider.value} ({model}): {decision.reason}")

        messages = build_context(
            conversation,
            system_prompt=self.settings.system_prompt,
            window=self.settings.context_window,
        )
        response = await send(
            decision.provider,
            messages,
            model,
            self.credentials.get(decision.provider),
            client=self._client,
            max_tokens=self.settings.max_tokens,
            timeout=self.settings.request_timeout,
        )
        return DispatchResult(
            provider=decision.provider,
            reason=decision.reason,
            response=response,
            model=model,
        )
