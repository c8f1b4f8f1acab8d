"""
Configuration Management for the Society Manager

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Letterhead details printed on receipts and notices, the storage location
and the logging level are all validated at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local SQLite storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SOCIETY_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database_path: str = Field(
        default="society.db",
        description="Path to the SQLite database file"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long SQLite waits on a locked database"
    )
    open_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made to open the database before giving up"
    )
    open_retry_max_wait_seconds: float = Field(
        default=4.0,
        ge=0,
        description="Upper bound on the backoff between open attempts"
    )

    @field_validator('database_path')
    @classmethod
    def validate_database_path(cls, v: str) -> str:
        """Warn if the parent directory is missing (it may be mounted later)."""
        if v != ":memory:" and not Path(v).expanduser().parent.exists():
            import warnings
            warnings.warn(
                f"Directory for database {v} does not exist. "
                "Create it before running the application."
            )
        return v


class SocietySettings(BaseSettings):
    """
    Society details and application behaviour.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SOCIETY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Letterhead
    name: str = Field(
        default="Tulsi Apartment",
        min_length=1,
        description="Society name printed on documents"
    )
    association_name: str = Field(
        default="Tulsi Apartment Owners Association",
        description="Name of the owners' association"
    )
    address: str = Field(
        default="Sector 4, City Center",
        description="Postal address line"
    )
    registration_number: str = Field(
        default="123/TULSI/APT",
        description="Society registration number"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Symbol printed before amounts"
    )

    # Legal notices
    notice_default_dues: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Outstanding amount printed on demand notices"
    )
    notice_response_days: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Days a member has to clear dues after a notice"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for activity logs"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def society(self) -> SocietySettings:
        return SocietySettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for each failure.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.society
        results["society"] = True
    except Exception as e:
        results["society"] = False
        results["society_error"] = str(e)

    return results
