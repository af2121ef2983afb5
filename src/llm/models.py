# src/llm/models.py — v2
"""LLM-facing types: messages, images, results and catalog entries."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ProviderTag(str, Enum):
    """Closed set of providers a model identifier can route to."""

    OPENAI = "openai"
    CLAUDE = "claude"
    GOOGLE = "google"


class Message(BaseModel):
    """Single message in a conversation, oldest first."""

    role: Literal["user", "assistant", "system"]
    content: str


class ImageInput(BaseModel):
    """Image attached to a message: inline base64 (raw or data URL) or a URL."""

    base64: str | None = None
    url: str | None = None
    mime_type: str | None = None

    @model_validator(mode="after")
    def validate_source(self) -> ImageInput:
        if not self.base64 and not self.url:
            raise ValueError("image requires either base64 data or a url")
        if self.base64 and self.url:
            raise ValueError("image takes base64 data or a url, not both")
        return self


class MultimodalMessage(Message):
    """Message carrying zero or more images after its text."""

    images: list[ImageInput] = Field(default_factory=list)

    def as_text(self) -> Message:
        """Drop images, keeping role and content."""
        return Message(role=self.role, content=self.content)


class GenerationResult(BaseModel):
    """Provider-agnostic generation output.

    ``tokens`` is best-effort total usage; 0 when the provider did not
    report it.
    """

    content: str
    tokens: int = 0


class ModelDescriptor(BaseModel):
    """Read-only catalog entry, serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    name: str
    provider: ProviderTag
    max_tokens: int
    cost_per_token: float
    supports_images: bool = False
    supports_text: bool = True


class GoogleModelInfo(BaseModel):
    """Gemini adapter's own model entry: capability flags, no pricing."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    name: str
    provider: ProviderTag
    max_tokens: int
    supports_images: bool = True
    supports_text: bool = True
