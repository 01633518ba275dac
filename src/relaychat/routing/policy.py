"""Rule-based provider selection.

Picks exactly one provider for the next reply from:
- Conversation length (cold start)
- Complexity markers and prompt length
- Code-like syntax
- Topical domain (from the classifier)
- Quality of the last assistant reply (continuity)
- Which providers currently have credentials

Rules are an ordered list evaluated short-circuit; the first one that
returns a provider wins. The policy holds no state, so the same
conversation and provider set always yield the same decision.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Callable, Iterable, Sequence

from relaychat.errors import EmptyProviderSet
from relaychat.messages import Message, Role
from relaychat.providers.base import Provider
from relaychat.routing.classifier import DomainClassifier

# Global preference, used for cold start and the final fallback
PREFERENCE_ORDER: list[Provider] = [
    Provider.OPENAI,
    Provider.CLAUDE,
    Provider.GROQ,
    Provider.DEEPSEEK,
    Provider.GEMINI,
]

DOMAIN_PREFERENCES: dict[str, list[Provider]] = {
    "coding": [Provider.OPENAI, Provider.GROQ, Provider.DEEPSEEK],
    "math": [Provider.CLAUDE, Provider.OPENAI, Provider.DEEPSEEK],
    "creative": [Provider.OPENAI, Provider.CLAUDE, Provider.GROQ],
    "analytical": [Provider.CLAUDE, Provider.OPENAI, Provider.DEEPSEEK],
    "scientific": [Provider.DEEPSEEK, Provider.CLAUDE, Provider.OPENAI],
    "philosophical": [Provider.CLAUDE, Provider.OPENAI, Provider.GEMINI],
    "business": [Provider.OPENAI, Provider.CLAUDE, Provider.GROQ],
    "educational": [Provider.OPENAI, Provider.DEEPSEEK, Provider.GEMINI],
}

COMPLEXITY_INDICATORS = (
    "detailed", "comprehensive", "in-depth", "thorough", "elaborate",
    "nuanced", "complex", "sophisticated", "advanced", "intricate",
    "technical",
)

LONG_PROMPT_CHARS = 300
HIGH_QUALITY_CHARS = 500
MEDIUM_QUALITY_CHARS = 200
CONTINUITY_MIN_USER_TURNS = 2
CONTINUITY_MIN_MESSAGES = 3


class ResponseQuality(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def assess_response_quality(response: str) -> ResponseQuality:
    """Rough structural quality of an assistant reply."""
    has_structure = "\n\n" in response or "#" in response or "*" in response
    has_technical = (
        "```" in response or "function" in response or "class" in response
    )

    if (len(response) > HIGH_QUALITY_CHARS and has_structure) or has_technical:
        return ResponseQuality.HIGH
    if len(response) > MEDIUM_QUALITY_CHARS:
        return ResponseQuality.MEDIUM
    return ResponseQuality.LOW


def is_complex(text: str) -> bool:
    lowered = text.lower()
    return (
        any(indicator in lowered for indicator in COMPLEXITY_INDICATORS)
        or len(text) > LONG_PROMPT_CHARS
    )


def has_code_pattern(text: str) -> bool:
    return (
        "```" in text
        or "function" in text
        or "class" in text
        or ("{" in text and "}" in text)
    )


@dataclass(frozen=True)
class RoutingDecision:
    """The provider chosen for one message and why."""
    provider: Provider
    reason: str
    rule: str = ""


@dataclass
class RoutingContext:
    """Signals derived once from the conversation.

    The domain is computed lazily so the classifier only runs when a
    rule actually asks for it.
    """
    conversation: Sequence[Message]
    classifier: DomainClassifier

    @cached_property
    def latest_user_text(self) -> str:
        for message in reversed(self.conversation):
            if message.role == Role.USER:
                return message.content
        return ""

    @cached_property
    def last_assistant_text(self) -> str | None:
        for message in reversed(self.conversation):
            if message.role == Role.ASSISTANT:
                return message.content
        return None

    @cached_property
    def user_turns(self) -> int:
        return sum(1 for m in self.conversation if m.role == Role.USER)

    @cached_property
    def domain(self) -> str | None:
        return self.classifier.classify(self.latest_user_text)


Picker = Callable[["RoutingPolicy", RoutingContext, frozenset[Provider]], Provider | None]


@dataclass(frozen=True)
class RoutingRule:
    """One step of the cascade.

    `pick` returns a provider when the rule applies, else None.
    `reason` may reference {domain}.
    """
    name: str
    pick: Picker
    reason: str


def _pick_cold_start(policy, ctx, available):
    if len(ctx.conversation) <= 1:
        return policy.first_available(available)
    return None


def _pick_complexity(policy, ctx, available):
    if is_complex(ctx.latest_user_text) and policy.nuanced_provider in available:
        return policy.nuanced_provider
    return None


def _pick_code(policy, ctx, available):
    if has_code_pattern(ctx.latest_user_text) and policy.code_provider in available:
        return policy.code_provider
    return None


def _pick_domain(policy, ctx, available):
    if ctx.domain is None:
        return None
    preferred = policy.domain_preferences.get(ctx.domain, policy.preference_order)
    for provider in preferred:
        if provider in available:
            return provider
    return None


def _pick_continuity(policy, ctx, available):
    if (
        ctx.user_turns > CONTINUITY_MIN_USER_TURNS
        and len(ctx.conversation) > CONTINUITY_MIN_MESSAGES
        and ctx.last_assistant_text is not None
        and assess_response_quality(ctx.last_assistant_text) == ResponseQuality.HIGH
        and policy.general_provider in available
    ):
        return policy.general_provider
    return None


def _pick_fallback(policy, ctx, available):
    return policy.first_available(available)


DEFAULT_RULES: list[RoutingRule] = [
    RoutingRule("cold_start", _pick_cold_start, "Initial conversation"),
    RoutingRule("complexity", _pick_complexity,
                "Complex question requiring nuanced response"),
    RoutingRule("code", _pick_code, "Code-focused request"),
    RoutingRule("domain", _pick_domain, "Best for {domain} content"),
    RoutingRule("continuity", _pick_continuity,
                "Continuing high-quality conversation thread"),
    RoutingRule("fallback", _pick_fallback,
                "Default selection based on availability"),
]


@dataclass
class RoutingPolicy:
    """Selects a provider for the next reply.

    Usage:
        policy = RoutingPolicy()
        decision = policy.select_provider(messages, {Provider.OPENAI, Provider.CLAUDE})
        # decision.provider = Provider.CLAUDE
        # decision.reason = "Complex question requiring nuanced response"
    """
    rules: list[RoutingRule] = field(default_factory=lambda: list(DEFAULT_RULES))
    preference_order: list[Provider] = field(
        default_factory=lambda: list(PREFERENCE_ORDER))
    domain_preferences: dict[str, list[Provider]] = field(
        default_factory=lambda: dict(DOMAIN_PREFERENCES))
    nuanced_provider: Provider = Provider.CLAUDE
    code_provider: Provider = Provider.OPENAI
    general_provider: Provider = Provider.OPENAI
    classifier: DomainClassifier = field(default_factory=DomainClassifier)

    def first_available(self, available: frozenset[Provider]) -> Provider:
        for provider in self.preference_order:
            if provider in available:
                return provider
        # Only reachable with a custom preference order missing providers
        return sorted(available, key=lambda p: p.value)[0]

    def select_provider(
        self,
        conversation: Sequence[Message],
        available: Iterable[Provider | str],
    ) -> RoutingDecision:
        """Route one message.

        Args:
            conversation: Ordered history, latest message last.
            available: Providers that currently have credentials.

        Returns:
            RoutingDecision whose provider is always in `available`.

        Raises:
            EmptyProviderSet: `available` is empty.
        """
        providers = frozenset(Provider(p) for p in available)
        if not providers:
            raise EmptyProviderSet()

        ctx = RoutingContext(conversation=conversation, classifier=self.classifier)
        for rule in self.rules:
            provider = rule.pick(self, ctx, providers)
            if provider is not None and provider in providers:
                reason = rule.reason
                if "{domain}" in reason:
                    reason = reason.format(domain=ctx.domain)
                return RoutingDecision(provider=provider, reason=reason, rule=rule.name)

        # The default rule list always ends in a catch-all; custom lists may not
        return RoutingDecision(
            provider=self.first_available(providers),
            reason="Default selection based on availability",
            rule="fallback",
        )


_default_policy = RoutingPolicy()


def select_provider(
    conversation: Sequence[Message],
    available: Iterable[Provider | str],
) -> RoutingDecision:
    """Route with the default rules."""
    return _default_policy.select_provider(conversation, available)
