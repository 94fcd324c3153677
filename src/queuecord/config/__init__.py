"""Configuration: environment-driven settings."""

from queuecord.config.settings import (
    AudioSettings,
    QueueSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "AudioSettings",
    "QueueSettings",
    "Settings",
    "clear_settings_cache",
    "get_settings",
]
