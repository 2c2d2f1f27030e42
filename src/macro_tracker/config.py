"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

ESTIMATOR_PROVIDERS = {"gemini", "openai"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path.home() / ".macro_tracker"
    state_key: str = "macroTrackerState"
    estimator_provider: str = "gemini"
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openai_model: str = "gpt-5.2"
    request_timeout_seconds: float = 30.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="MACRO_TRACKER_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_provider(raw: str | None) -> str:
    """Normalize the estimator provider name, falling back to Gemini."""
    if raw is None:
        return "gemini"
    cleaned = raw.strip().lower()
    if cleaned in ESTIMATOR_PROVIDERS:
        return cleaned
    return "gemini"
