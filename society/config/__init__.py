"""Configuration package."""

from society.config.settings import (
    Settings,
    SocietySettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "Settings",
    "SocietySettings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
