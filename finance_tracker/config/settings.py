"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, and only the
gateways (file storage) and the console read it. The ledger stores and
the report engine take no configuration at all.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Binary data file configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("."),
        description="Directory holding the data files"
    )
    categories_file: str = Field(
        default="categories.dat",
        description="File name for category records"
    )
    transactions_file: str = Field(
        default="transactions.dat",
        description="File name for transaction records"
    )
    budgets_file: str = Field(
        default="budgets.dat",
        description="File name for budget records"
    )

    # Lets a previously obfuscated data set be read at startup
    obfuscation_key: Optional[str] = Field(
        default=None,
        description="Single-character XOR key (NOT secure)"
    )

    @field_validator("obfuscation_key")
    @classmethod
    def validate_obfuscation_key(cls, v: Optional[str]) -> Optional[str]:
        """The key is exactly one character that fits in a byte."""
        if v is None or v == "":
            return None
        if len(v) != 1 or not 0 < ord(v) < 256:
            raise ValueError("Obfuscation key must be a single character")
        return v

    @property
    def obfuscation_key_byte(self) -> Optional[int]:
        return ord(self.obfuscation_key) if self.obfuscation_key else None

    @property
    def categories_path(self) -> Path:
        return self.data_dir / self.categories_file

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_file

    @property
    def budgets_path(self) -> Path:
        return self.data_dir / self.budgets_file


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

    # Environment
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Minimum level for audit and diagnostic logs"
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON instead of console text"
    )

    # CSV exchange
    default_export_path: str = Field(
        default="export.csv",
        description="Export path used when the user leaves it blank"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level


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
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries describing failures. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
