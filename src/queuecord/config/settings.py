"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import FetchConcurrency, HistoryCapacity, VolumeFloat


class QueueSettings(BaseModel):
    """Queue engine configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    history_capacity: HistoryCapacity = Field(
        default=10,
        validation_alias=AliasChoices("history_capacity", "history_size"),
    )
    max_fetch_concurrency: FetchConcurrency = Field(
        default=5,
        validation_alias=AliasChoices("max_fetch_concurrency", "fetch_concurrency"),
    )


class AudioSettings(BaseModel):
    """Audio extraction and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: VolumeFloat = 0.5
    ytdlp_format: str = "bestaudio"
    ytdlp_binary: str = Field(
        default="yt-dlp", validation_alias=AliasChoices("ytdlp_binary", "ytdlp_path")
    )
    search_prefix: str = "ytsearch"
    watch_url_template: str = "https://www.youtube.com/watch?v={id}"
    socket_timeout: int = Field(default=10, ge=1, le=120)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "",
            "options": "-vn",
        }
    )


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - QUEUE__HISTORY_CAPACITY, QUEUE__MAX_FETCH_CONCURRENCY (nested)
    - AUDIO__YTDLP_FORMAT, AUDIO__DEFAULT_VOLUME, etc. (nested)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    queue: QueueSettings = Field(default_factory=QueueSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
