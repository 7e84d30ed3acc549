"""
Configuration management for the flight schedule service.

Loads settings from environment variables (and a local .env file).
"""

from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before settings are initialized
load_dotenv()


# Philippine airports; flights whose far end is one of these are kept
PHILIPPINE_AIRPORTS = {
    "CEB": "Mactan-Cebu International Airport",
    "CRK": "Clark International Airport",
    "MNL": "Ninoy Aquino International Airport",
    "TAG": "Tagbilaran Airport",
    "KLO": "Kalibo International Airport",
    "DVO": "Francisco Bangoy International Airport",
    "ILO": "Iloilo International Airport",
    "BCD": "Bacolod-Silay International Airport",
    "PPS": "Puerto Princesa International Airport",
    "CGY": "Laguindingan Airport",
    "ZAM": "Zamboanga International Airport",
    "TAC": "Daniel Z. Romualdez Airport",
}

# Departure airports offered for collection
DEPARTURE_AIRPORTS = {
    "ICN": "Incheon International Airport",
    "PUS": "Gimhae International Airport",
    "GMP": "Gimpo International Airport",
    "CJU": "Jeju International Airport",
    **PHILIPPINE_AIRPORTS,
}


def _split_codes(value: str) -> frozenset[str]:
    return frozenset(code.strip().upper() for code in value.split(",") if code.strip())


class ProviderSettings(BaseSettings):
    """AeroDataBox (RapidAPI) configuration."""

    base_url: str = Field(default="https://aerodatabox.p.rapidapi.com")
    host: str = Field(default="aerodatabox.p.rapidapi.com")
    api_key: str | None = Field(default=None)
    timeout_seconds: int = Field(default=30)

    model_config = SettingsConfigDict(env_prefix="PROVIDER_")


class CollectionSettings(BaseSettings):
    """Monthly collection pacing and airport scope."""

    # Provider rate limit contract, not tuned per call
    intra_day_delay_seconds: float = Field(default=2.0)
    inter_day_delay_seconds: float = Field(default=3.0)
    # Comma-separated IATA codes
    tracked_airports: str = Field(default=",".join(PHILIPPINE_AIRPORTS))
    departure_airports: str = Field(default=",".join(DEPARTURE_AIRPORTS))

    model_config = SettingsConfigDict(env_prefix="COLLECTION_")

    @property
    def tracked_airport_codes(self) -> frozenset[str]:
        """Airports a collected flight must connect to."""
        return _split_codes(self.tracked_airports)

    @property
    def departure_airport_codes(self) -> frozenset[str]:
        return _split_codes(self.departure_airports)


class StorageSettings(BaseSettings):
    """Schedule document store configuration."""

    path: str = Field(default="data/schedules.db")
    busy_timeout_seconds: float = Field(default=30.0)

    model_config = SettingsConfigDict(env_prefix="STORE_")

    @property
    def full_path(self) -> Path:
        """Get the full path to the document store file."""
        return Path(self.path)


class DatabaseSettings(BaseSettings):
    """SQLite collection run tracking configuration."""

    path: str = Field(default="data/collection_runs.db")

    model_config = SettingsConfigDict(env_prefix="DB_")

    @property
    def full_path(self) -> Path:
        """Get the full path to the database file."""
        return Path(self.path)


class AuthSettings(BaseSettings):
    """Principal verification configuration."""

    # Comma-separated bearer tokens accepted by the static verifier
    api_tokens: str = Field(default="")
    cookie_name: str = Field(default="session")

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    @property
    def token_set(self) -> frozenset[str]:
        return frozenset(token.strip() for token in self.api_tokens.split(",") if token.strip())


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    log_dir: str = Field(default="logs")
    log_file: str = Field(default="flight-schedules.log")
    rotation: str = Field(default="10 MB")
    retention: str = Field(default="7 days")

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""

    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    collection: CollectionSettings = Field(default_factory=CollectionSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Environment name (development, staging, production)
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: The application settings
    """
    return Settings()


settings = get_settings()

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
