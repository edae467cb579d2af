"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

PLACEHOLDER_API_KEY = "PLACEHOLDER_API_KEY"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    gemini_api_key: str | None = None
    api_key_endpoint: str | None = None
    data_dir: str = ".frame_lab"
    session_check_interval_seconds: float = 30.0
    video_poll_interval_seconds: float = 10.0
    retry_max_attempts: int = 5
    retry_initial_delay_seconds: float = 1.0
    default_video_model: str = "veo-3.0-fast-generate-001"
    image_edit_model: str = "gemini-2.5-flash-image"
    image_generation_model: str = "imagen-4.0-generate-001"
    prompt_model: str = "gemini-2.5-flash"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def is_placeholder_api_key(raw: str | None) -> bool:
    """Return True when an API key is unset or still the placeholder marker."""
    if raw is None:
        return True
    cleaned = raw.strip()
    return not cleaned or PLACEHOLDER_API_KEY in cleaned
