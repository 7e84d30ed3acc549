"""Configuration module for the flight schedule service."""

from src.config.config import (
    Settings,
    ProviderSettings,
    CollectionSettings,
    StorageSettings,
    DatabaseSettings,
    AuthSettings,
    LoggingSettings,
    PHILIPPINE_AIRPORTS,
    DEPARTURE_AIRPORTS,
    get_settings,
    settings,
)

__all__ = [
    "Settings",
    "ProviderSettings",
    "CollectionSettings",
    "StorageSettings",
    "DatabaseSettings",
    "AuthSettings",
    "LoggingSettings",
    "PHILIPPINE_AIRPORTS",
    "DEPARTURE_AIRPORTS",
    "get_settings",
    "settings",
]
