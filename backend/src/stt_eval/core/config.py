"""Configuration management using Pydantic Settings"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="STT_EVAL_",
        extra="ignore",
        populate_by_name=True,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Logging
    log_level: str = "INFO"

    # Storage
    database_path: Path = Path("data/stt_eval.db")
    audio_storage_dir: Path = Path("data/audio")
    audio_signing_secret: str = "change-me"
    signed_url_expiry_seconds: int = 3600

    # Providers
    deepgram_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("STT_EVAL_DEEPGRAM_API_KEY", "DEEPGRAM_API_KEY"),
    )
    assemblyai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "STT_EVAL_ASSEMBLYAI_API_KEY", "ASSEMBLYAI_API_KEY"
        ),
    )
    deepgram_base_url: str = "https://api.deepgram.com/v1/listen"
    assemblyai_base_url: str = "https://api.assemblyai.com/v2"
    http_timeout_seconds: float = 60.0
    poll_max_attempts: int = 60
    poll_interval_seconds: float = 1.0

    # Prompt catalogue
    example_set: str = "default"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> LogLevel:
        """Validate log level, fallback to INFO if invalid."""
        upper_v = v.upper()
        if upper_v not in VALID_LOG_LEVELS:
            return "INFO"
        return upper_v  # type: ignore[return-value]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance. Use this for dependency injection."""
    return Settings()


settings = get_settings()
