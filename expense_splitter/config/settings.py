"""
Configuration Management for Expense Splitter

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine tolerance and rounding live next to the application limits so
every numeric policy of the system is visible in one place.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Settlement engine numeric policy."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITTER_ENGINE_",
        extra="ignore"
    )

    tolerance: Decimal = Field(
        default=Decimal("0.01"),
        gt=0,
        description="Smallest balance magnitude treated as nonzero"
    )
    decimal_places: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places used when rounding transfer amounts"
    )

    @property
    def quantum(self) -> Decimal:
        """Rounding quantum, e.g. Decimal('0.01') for two places."""
        return Decimal(1).scaleb(-self.decimal_places)


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level for the local structured log"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False renders for the console)"
    )

    # Sanity limits (warnings only, never hard rejections)
    max_people: int = Field(
        default=50,
        ge=1,
        description="Group size above which adding a person is flagged"
    )
    max_expense_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Expense amount above which an expense is flagged"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


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
    def engine(self) -> EngineSettings:
        return EngineSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries describing failures.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.engine
        results["engine"] = True
    except Exception as e:
        results["engine"] = False
        results["engine_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
