# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider credentials, generation defaults,
request hardening and logging. Adapters receive a Settings instance at
construction; nothing reads the environment after that.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Provider credentials ===
    openai_api_key: str = ""
    google_ai_api_key: str = ""
    claude_api_key: str = ""

    # === Router defaults ===
    default_max_tokens: int = 1000
    default_temperature: float = 0.7

    # === Google generation defaults (adapter-level, not per request) ===
    google_default_model: str = "gemini-1.5-flash"
    google_temperature: float = 0.7
    google_top_k: int = 40
    google_top_p: float = 0.95
    google_max_output_tokens: int = 8192

    # === Hardening ===
    request_timeout_s: float | None = 120.0
    image_fetch_timeout_s: float = 30.0

    # === Images ===
    optimize_cloudinary_urls: bool = True
    verify_image_signatures: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("default_max_tokens", "google_max_output_tokens", "google_top_k")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("default_temperature", "google_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:  # noqa: N805
        if not 0.0 <= v <= 2.0:
            raise ValueError("temperature must be within [0, 2]")
        return v

    @field_validator("google_top_p")
    @classmethod
    def validate_top_p(cls, v: float) -> float:  # noqa: N805
        if not 0.0 < v <= 1.0:
            raise ValueError("top_p must be within (0, 1]")
        return v

    @field_validator("request_timeout_s", "image_fetch_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:  # noqa: N805
        """Timeouts must be positive; None disables the request timeout."""
        if v is not None and v <= 0:
            raise ValueError("timeout must be > 0")
        return v

    # --- Helpers ---

    @property
    def google_generation_config(self) -> dict[str, float | int]:
        """Generation parameters shared by every Gemini call."""
        return {
            "temperature": self.google_temperature,
            "top_k": self.google_top_k,
            "top_p": self.google_top_p,
            "max_output_tokens": self.google_max_output_tokens,
        }

    def require_google_key(self) -> str:
        """Return the Google API key or fail hard.

        Raises:
            ConfigurationError: If GOOGLE_AI_API_KEY is not configured.
        """
        if not self.google_ai_api_key:
            raise ConfigurationError("GOOGLE_AI_API_KEY is not configured")
        return self.google_ai_api_key


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or embedding apps).

    Returns:
        Validated Settings instance.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
