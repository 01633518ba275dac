"""Settings loaded from ~/.relaychat/config.yaml.

Example config.yaml:

    request_timeout: 30
    max_tokens: 4000
    context_window: 10
    fallback_provider: groq
    providers:
      openai:
        model: gpt-4o-mini
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from relaychat.context import DEFAULT_CONTEXT_WINDOW, DEFAULT_SYSTEM_PROMPT
from relaychat.providers.base import DEFAULT_MAX_TOKENS, DEFAULT_TIMEOUT, Provider


class ProviderConfig(BaseModel):
    """Per-provider overrides."""
    model: str | None = None


class Settings(BaseModel):
    """Runtime settings for routing and dispatch."""
    request_timeout: float = Field(DEFAULT_TIMEOUT, gt=0)
    max_tokens: int = Field(DEFAULT_MAX_TOKENS, gt=0)
    context_window: int = Field(DEFAULT_CONTEXT_WINDOW, ge=0)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    fallback_provider: Provider | None = None
    providers: dict[Provider, ProviderConfig] = Field(default_factory=dict)

    def model_overrides(self) -> dict[Provider, str]:
        return {p: c.model for p, c in self.providers.items() if c.model}


def get_config_dir() -> Path:
    """Get the RelayChat config directory (RELAYCHAT_HOME overrides)."""
    override = os.environ.get("RELAYCHAT_HOME")
    config_dir = Path(override) if override else Path.home() / ".relaychat"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    return get_config_dir() / "config.yaml"


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load the raw config mapping."""
    config_path = path or get_config_path()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings; missing file means defaults."""
    return Settings.model_validate(load_config(path))


def save_settings(settings: Settings, path: Path | None = None) -> None:
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(mode="json", exclude_defaults=True)
    with open(config_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False)
