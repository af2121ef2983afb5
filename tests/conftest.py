# tests/conftest.py — v2
"""Shared test fixtures for unit tests.

Provides settings, fake provider adapters, a fake Gemini model factory
and sample image payloads. No network access — all SDK calls are mocked.
"""

from __future__ import annotations

import base64
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from chatrouter.config.settings import Settings
from chatrouter.llm.adapters.google_adapter import GoogleAdapter
from chatrouter.llm.models import GenerationResult
from chatrouter.llm.router import AIRouter
from chatrouter.tracking.usage_tracker import UsageTracker

PNG_BYTES = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A]) + b"\x00" * 24
JPEG_BYTES = bytes([0xFF, 0xD8, 0xFF, 0xE0]) + b"\x00" * 28


# === FIXTURES: Settings ===


@pytest.fixture
def settings() -> Settings:
    """Settings with a Google key and no .env interference."""
    return Settings(
        _env_file=None,
        google_ai_api_key="test-google-key",
        openai_api_key="test-openai-key",
        claude_api_key="",
        request_timeout_s=5.0,
    )


# === FIXTURES: Images ===


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_b64() -> str:
    return base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def jpeg_b64() -> str:
    return base64.b64encode(JPEG_BYTES).decode("ascii")


# === FIXTURES: Fake Gemini SDK ===


class FakeChat:
    """Stands in for a google.generativeai ChatSession."""

    def __init__(self, owner: FakeGeminiModel, history: list[dict[str, Any]]):
        self._owner = owner
        self.history = history

    async def send_message_async(self, parts: Any) -> Any:
        self._owner.sent.append(parts)
        if self._owner.error is not None:
            raise self._owner.error
        return SimpleNamespace(
            text=self._owner.reply,
            usage_metadata=SimpleNamespace(total_token_count=self._owner.tokens),
        )


class FakeGeminiModel:
    """Stands in for google.generativeai.GenerativeModel."""

    def __init__(self, name: str, generation_config: dict, system_instruction: str | None):
        self.name = name
        self.generation_config = generation_config
        self.system_instruction = system_instruction
        self.histories: list[list[dict[str, Any]]] = []
        self.sent: list[Any] = []
        self.reply = "gemini reply"
        self.tokens = 12
        self.error: Exception | None = None

    def start_chat(self, history: list[dict[str, Any]]) -> FakeChat:
        self.histories.append(history)
        return FakeChat(self, history)


class FakeModelFactory:
    """Records every model handle the adapter asks for."""

    def __init__(self) -> None:
        self.models: list[FakeGeminiModel] = []

    def __call__(self, name: str, generation_config: dict, system_instruction: str | None):
        model = FakeGeminiModel(name, generation_config, system_instruction)
        self.models.append(model)
        return model

    @property
    def last(self) -> FakeGeminiModel:
        return self.models[-1]


@pytest.fixture
def model_factory() -> FakeModelFactory:
    return FakeModelFactory()


@pytest.fixture
def google_adapter(model_factory: FakeModelFactory) -> GoogleAdapter:
    return GoogleAdapter(api_key="test-google-key", model_factory=model_factory)


# === FIXTURES: Fake OpenAI / Claude adapters ===


@pytest.fixture
def fake_openai() -> MagicMock:
    adapter = MagicMock()
    adapter.generate_response = AsyncMock(
        return_value=GenerationResult(content="hello", tokens=5)
    )
    adapter.generate_stream_response = AsyncMock()
    adapter.supports_streaming = True
    adapter.get_available_models.return_value = [
        "gpt-4", "gpt-4-turbo", "gpt-3.5-turbo", "gpt-3.5-turbo-16k",
    ]
    return adapter


@pytest.fixture
def fake_claude() -> MagicMock:
    adapter = MagicMock()
    adapter.generate_response = AsyncMock(
        return_value=GenerationResult(content="claude reply", tokens=7)
    )
    adapter.supports_streaming = False
    adapter.get_available_models.return_value = [
        "claude-3-opus-20240229", "claude-3-sonnet-20240229", "claude-3-haiku-20240307",
    ]
    return adapter


@pytest.fixture
def usage_tracker() -> UsageTracker:
    return UsageTracker()


@pytest.fixture
def router(
    fake_openai: MagicMock,
    fake_claude: MagicMock,
    google_adapter: GoogleAdapter,
    settings: Settings,
    usage_tracker: UsageTracker,
) -> AIRouter:
    return AIRouter(
        openai=fake_openai,
        claude=fake_claude,
        google=google_adapter,
        settings=settings,
        usage_tracker=usage_tracker,
    )
