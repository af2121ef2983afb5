# src/llm/catalog.py — v1
"""Static model catalog exposed to chat clients.

Only the OpenAI and Claude id lists come from the adapters; every number
below is fixed so existing clients keep seeing the same values.
"""

from __future__ import annotations

from typing import Sequence

from chatrouter.llm.errors import UnknownProviderError
from chatrouter.llm.models import ModelDescriptor, ProviderTag
from chatrouter.llm.routing import classify_provider

OPENAI_MAX_TOKENS = 4000
OPENAI_COST_PER_TOKEN = 0.00003
CLAUDE_MAX_TOKENS = 200000
CLAUDE_COST_PER_TOKEN = 0.000015

GOOGLE_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        id="gemini-1.5-flash",
        name="Gemini 1.5 Flash",
        provider=ProviderTag.GOOGLE,
        max_tokens=8192,
        cost_per_token=0.00001,
        supports_images=True,
        supports_text=True,
    ),
    ModelDescriptor(
        id="gemini-1.5-pro",
        name="Gemini 1.5 Pro",
        provider=ProviderTag.GOOGLE,
        max_tokens=8192,
        cost_per_token=0.00002,
        supports_images=True,
        supports_text=True,
    ),
)


def build_catalog(
    openai_models: Sequence[str],
    claude_models: Sequence[str],
) -> list[ModelDescriptor]:
    """Concatenate OpenAI, Claude, then Google descriptors in that order."""
    catalog: list[ModelDescriptor] = []
    for model_id in openai_models:
        catalog.append(ModelDescriptor(
            id=model_id,
            name=model_id,
            provider=ProviderTag.OPENAI,
            max_tokens=OPENAI_MAX_TOKENS,
            cost_per_token=OPENAI_COST_PER_TOKEN,
            supports_images=False,
        ))
    for model_id in claude_models:
        catalog.append(ModelDescriptor(
            id=model_id,
            name=model_id,
            provider=ProviderTag.CLAUDE,
            max_tokens=CLAUDE_MAX_TOKENS,
            cost_per_token=CLAUDE_COST_PER_TOKEN,
            supports_images=False,
        ))
    catalog.extend(GOOGLE_MODELS)
    return catalog


def cost_per_token(model_id: str) -> float:
    """Per-token price for a model id; 0.0 for models outside the catalog."""
    for descriptor in GOOGLE_MODELS:
        if descriptor.id == model_id:
            return descriptor.cost_per_token
    try:
        provider = classify_provider(model_id)
    except UnknownProviderError:
        return 0.0
    if provider is ProviderTag.OPENAI:
        return OPENAI_COST_PER_TOKEN
    if provider is ProviderTag.CLAUDE:
        return CLAUDE_COST_PER_TOKEN
    return 0.0
