# src/llm/routing.py — v1
"""Model identifier → provider classification and Gemini message translation.

Resolution order is fixed: first matching prefix wins.
  gpt-, text-  → openai
  claude-      → claude
  gemini-      → google
Anything else is rejected.
"""

from __future__ import annotations

from typing import Any, Sequence

from chatrouter.llm.errors import UnknownProviderError
from chatrouter.llm.models import Message, ProviderTag

_PREFIX_RULES: tuple[tuple[str, ProviderTag], ...] = (
    ("gpt-", ProviderTag.OPENAI),
    ("text-", ProviderTag.OPENAI),
    ("claude-", ProviderTag.CLAUDE),
    ("gemini-", ProviderTag.GOOGLE),
)


def classify_provider(model_id: str) -> ProviderTag:
    """Return the provider for a model identifier.

    Raises:
        UnknownProviderError: If no prefix rule matches.
    """
    for prefix, tag in _PREFIX_RULES:
        if model_id.startswith(prefix):
            return tag
    raise UnknownProviderError(model_id)


def to_google_role(role: str) -> str:
    """Gemini only knows ``user`` and ``model``."""
    return "model" if role == "assistant" else "user"


def to_google_contents(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Translate router messages into Gemini content dicts, order preserved."""
    return [
        {"role": to_google_role(m.role), "parts": [{"text": m.content}]}
        for m in messages
    ]
