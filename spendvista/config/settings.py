"""
Configuration Management for SpendVista

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Thresholds that encode business rules (budget warning level, sanity
limits) live next to the storage location so they are validated
together at startup.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local JSON storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPENDVISTA_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".spendvista",
        description="Directory holding one JSON file per stored key"
    )
    indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="JSON indentation for stored files (0 = compact)"
    )

    @field_validator('data_dir')
    @classmethod
    def validate_data_dir(cls, v: Path) -> Path:
        """Reject a data_dir that points at an existing file."""
        v = v.expanduser()
        if v.exists() and not v.is_dir():
            raise ValueError(f"data_dir is not a directory: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPENDVISTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Presentation
    currency_symbol: str = Field(
        default="R",
        max_length=5,
        description="Currency symbol shown in front of amounts"
    )
    recent_transaction_count: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many transactions the dashboard lists"
    )

    # Business thresholds
    budget_warning_percentage: Decimal = Field(
        default=Decimal("80"),
        gt=0,
        lt=100,
        description="Budget usage (percent) at which the status becomes 'warning'"
    )

    # Validation thresholds
    max_transaction_amount: Decimal = Field(
        default=Decimal("10000000"),
        gt=0,
        description="Maximum reasonable transaction amount (for sanity checking)"
    )
    future_date_tolerance_days: int = Field(
        default=31,
        ge=0,
        description="How many days in the future a transaction date can be"
    )


class Settings(BaseSettings):
    """Root container. Each section rereads the environment when accessed."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


SECTIONS = ("storage", "app")


@lru_cache()
def get_settings() -> Settings:
    """Cached root settings; get_settings.cache_clear() forces a reread."""
    return Settings()


def validate_all_settings() -> dict[str, Any]:
    """
    Load every settings section once and report which ones failed.

    Returns:
        {section: True/False}, plus {section}_error holding the
        pydantic message for each section that did not load
    """
    settings = get_settings()
    results: dict[str, Any] = {}

    for section in SECTIONS:
        try:
            getattr(settings, section)
        except ValidationError as e:
            results[section] = False
            results[f"{section}_error"] = str(e)
        else:
            results[section] = True

    return results
