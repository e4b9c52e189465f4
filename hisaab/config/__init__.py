"""Configuration package."""

from hisaab.config.settings import (
    AppSettings,
    ClassifierSettings,
    GeminiSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ClassifierSettings",
    "GeminiSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
