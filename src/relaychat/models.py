"""Static model catalog.

Provider selection never looks at this table. Once a provider is
chosen, resolve_model() turns the caller's model preference into a
wire model string that provider actually accepts.
"""

from dataclasses import dataclass

from relaychat.providers.base import Provider


@dataclass(frozen=True)
class ModelOption:
    """A selectable model."""
    id: str
    display_name: str
    wire_value: str
    description: str
    max_tokens: int
    provider: Provider


AVAILABLE_MODELS: list[ModelOption] = [
    ModelOption(
        "llama3", "LLaMA 3", "llama3-70b-8192",
        "Meta's optimized 70B parameter model", 8192, Provider.GROQ,
    ),
    ModelOption(
        "gpt4o", "GPT-4o", "gpt-4o",
        "OpenAI's most capable multimodal model", 8192, Provider.OPENAI,
    ),
    ModelOption(
        "claude3", "Claude 3 Opus", "claude-3-opus-20240229",
        "Anthropic's most capable language model", 4096, Provider.CLAUDE,
    ),
    ModelOption(
        "deepseek", "DeepSeek Chat", "deepseek-chat",
        "DeepSeek's large language model", 4096, Provider.DEEPSEEK,
    ),
    ModelOption(
        "gemini", "Gemini Pro", "gemini-1.5-pro-latest",
        "Google's advanced multimodal model", 8192, Provider.GEMINI,
    ),
]

# Catalog entry used when the caller's hint does not fit the provider
DEFAULT_MODEL_IDS: dict[Provider, str] = {
    Provider.GROQ: "llama3",
    Provider.OPENAI: "gpt4o",
    Provider.CLAUDE: "claude3",
    Provider.DEEPSEEK: "deepseek",
    Provider.GEMINI: "gemini",
}


def get_model(model_id: str) -> ModelOption | None:
    """Find a catalog entry by id or wire value."""
    for option in AVAILABLE_MODELS:
        if model_id in (option.id, option.wire_value):
            return option
    return None


def default_model(provider: Provider) -> ModelOption:
    option = get_model(DEFAULT_MODEL_IDS[provider])
    if option is None:
        raise KeyError(f"No catalog entry for {provider.value} default model")
    return option


def resolve_model(
    provider: Provider,
    hint: ModelOption | str | None = None,
    overrides: dict[Provider, str] | None = None,
) -> str:
    """Pick the wire model string to send to a provider.

    Order: a hint that belongs to this provider, then a configured
    override, then the provider's catalog default.
    """
    if isinstance(hint, str):
        hint = get_model(hint)
    if hint is not None and hint.provider == provider:
        return hint.wire_value

    if overrides and overrides.get(provider):
        return overrides[provider]

    return default_model(provider).wire_value
