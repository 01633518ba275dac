"""Conversation message and normalized response types."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Who authored a message."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TokenCounts:
    """Token accounting attached to an assistant message."""
    prompt: int = 0
    completion: int = 0
    total: int = 0


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Message:
    """A single immutable conversation entry.

    System messages are synthesized when a request is built
    (see relaychat.context) and never come from user input.
    """
    id: str
    role: Role
    content: str
    timestamp: int = field(default_factory=_now_ms)
    tokens: TokenCounts | None = None

    @classmethod
    def user(cls, content: str) -> "Message":
        ts = _now_ms()
        return cls(id=f"user-{ts}", role=Role.USER, content=content, timestamp=ts)

    @classmethod
    def assistant(cls, content: str, tokens: TokenCounts | None = None) -> "Message":
        ts = _now_ms()
        return cls(
            id=f"assistant-{ts}",
            role=Role.ASSISTANT,
            content=content,
            timestamp=ts,
            tokens=tokens,
        )

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(id="system", role=Role.SYSTEM, content=content, timestamp=0)

    @classmethod
    def from_response(cls, response: "NormalizedResponse") -> "Message":
        """Build the assistant reply for a normalized backend response."""
        usage = response.usage
        return cls.assistant(
            response.content,
            TokenCounts(
                prompt=usage.prompt_tokens,
                completion=usage.completion_tokens,
                total=usage.total_tokens,
            ),
        )

    def to_wire(self) -> dict[str, str]:
        """Plain role/content pair, the shape OpenAI-style APIs expect."""
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class Usage:
    """Token usage in the common shape every adapter reports."""
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class NormalizedResponse:
    """Backend-agnostic result: reply text plus token usage."""
    content: str
    usage: Usage = field(default_factory=Usage)
    model: str = ""
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
