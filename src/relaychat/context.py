"""Builds the message list actually sent to a backend."""

from typing import Sequence

from relaychat.messages import Message, Role

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. "
    "Provide clear, concise and accurate responses."
)
DEFAULT_CONTEXT_WINDOW = 10


def build_context(
    conversation: Sequence[Message],
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    window: int = DEFAULT_CONTEXT_WINDOW,
) -> list[Message]:
    """Prepend the system prompt and keep only the most recent turns.

    System entries already in the conversation are dropped; the
    synthesized prompt is the only one sent. A window of 0 keeps
    every turn.
    """
    turns = [m for m in conversation if m.role != Role.SYSTEM]
    if window > 0:
        turns = turns[-window:]

    if not system_prompt:
        return turns
    return [Message.system(system_prompt), *turns]
