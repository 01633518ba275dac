"""Per-provider API key storage.

One mapping Provider -> key, persisted as YAML with owner-only
permissions. Environment variables win over the file so keys can be
injected without touching disk.
"""

import logging
import os
from pathlib import Path

import yaml

from relaychat.config import get_config_dir
from relaychat.providers.base import Provider

logger = logging.getLogger(__name__)

ENV_VARS: dict[Provider, str] = {
    Provider.GROQ: "GROQ_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
    Provider.CLAUDE: "ANTHROPIC_API_KEY",
    Provider.DEEPSEEK: "DEEPSEEK_API_KEY",
    Provider.GEMINI: "GEMINI_API_KEY",
}


def get_credentials_path() -> Path:
    return get_config_dir() / ".credentials"


class CredentialStore:
    """Reads and writes provider API keys.

    Usage:
        store = CredentialStore()
        store.set(Provider.OPENAI, "sk-...")
        store.available()  # frozenset({Provider.OPENAI})
    """

    def __init__(self, path: Path | None = None, use_env: bool = True):
        self.path = path or get_credentials_path()
        self.use_env = use_env
        self._keys: dict[Provider, str] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        with open(self.path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed credentials file: {self.path}")
            return
        for name, key in data.items():
            try:
                provider = Provider(name)
            except ValueError:
                logger.warning(f"Ignoring credential for unknown provider: {name}")
                continue
            if key:
                self._keys[provider] = str(key)

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {p.value: k for p, k in self._keys.items()}
        with open(self.path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
        self.path.chmod(0o600)

    def get(self, provider: Provider | str) -> str:
        """Current key for a provider, or "" if none is configured."""
        provider = Provider(provider)
        if self.use_env:
            env_value = os.environ.get(ENV_VARS[provider])
            if env_value:
                return env_value
        return self._keys.get(provider, "")

    def set(self, provider: Provider | str, api_key: str) -> None:
        """Store a key; an empty key removes the stored one."""
        provider = Provider(provider)
        api_key = api_key.strip()
        if api_key:
            self._keys[provider] = api_key
        else:
            self._keys.pop(provider, None)
        self._save()

    def remove(self, provider: Provider | str) -> None:
        self.set(provider, "")

    def source(self, provider: Provider | str) -> str | None:
        """Where the active key comes from: "env", "file", or None."""
        provider = Provider(provider)
        if self.use_env and os.environ.get(ENV_VARS[provider]):
            return "env"
        if self._keys.get(provider):
            return "file"
        return None

    def available(self) -> frozenset[Provider]:
        """Providers with a non-empty credential right now."""
        return frozenset(p for p in Provider if self.get(p))
