"""Configuration management for the Cursebound rules engine.

This module provides centralized configuration management using
pydantic-settings, supporting environment variables, .env files, and runtime
overrides.

Example:
    >>> from cursebound.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.game.point_buy_budget
    27

Environment Variables:
    CURSEBOUND_DEBUG: Enable debug mode
    CURSEBOUND_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    CURSEBOUND_JSON_LOGS: Emit JSON log lines instead of console output
    CURSEBOUND_GAME_POINT_BUY_BUDGET: Points available during character creation
    CURSEBOUND_GAME_BLACK_FLASH_MARGIN: Margin over the DC a natural 20 must reach
    CURSEBOUND_GAME_BLACK_FLASH_RESTORE_RATIO: Fraction of each pool's max restored
    CURSEBOUND_STORAGE_BACKEND: Persistence backend ('memory' or 'sqlite')
    CURSEBOUND_STORAGE_DATABASE_PATH: Path to the SQLite database file
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cursebound.core.constants import (
    BLACK_FLASH_MARGIN,
    BLACK_FLASH_RESTORE_RATIO,
    POINT_BUY_BUDGET,
    RECENT_ROLL_LIMIT,
)
from cursebound.core.exceptions import ConfigurationError


class GameSettings(BaseSettings):
    """Configuration for rules engine behavior.

    Attributes:
        point_buy_budget: Points available to the attribute editor.
        black_flash_margin: How far a natural 20 must exceed the DC.
        black_flash_restore_ratio: Fraction of each pool's max restored.
        recent_roll_limit: Number of rolls shown in the recent history.
    """

    model_config = SettingsConfigDict(
        env_prefix="CURSEBOUND_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    point_buy_budget: int = Field(
        default=POINT_BUY_BUDGET,
        ge=0,
        le=100,
        description="Point-buy budget for character creation",
    )
    black_flash_margin: int = Field(
        default=BLACK_FLASH_MARGIN,
        ge=0,
        description="Margin over the DC required for a Black Flash",
    )
    black_flash_restore_ratio: float = Field(
        default=BLACK_FLASH_RESTORE_RATIO,
        gt=0,
        le=1,
        description="Fraction of pe/ether/vigor max restored on a Black Flash",
    )
    recent_roll_limit: int = Field(
        default=RECENT_ROLL_LIMIT,
        ge=1,
        le=100,
        description="Rolls shown in the recent history",
    )


class StorageSettings(BaseSettings):
    """Configuration for the persistence collaborator.

    Attributes:
        backend: Which collaborator implementation to build.
        database_path: Path to the SQLite database file.
        retry_attempts: Attempts made on a locked SQLite database.
    """

    model_config = SettingsConfigDict(
        env_prefix="CURSEBOUND_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Persistence backend",
    )
    database_path: Path = Field(
        default=Path("data/cursebound.db"),
        description="Path to SQLite database",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts on a locked database",
    )

    @model_validator(mode="after")
    def ensure_database_directory(self) -> "StorageSettings":
        """Create the database directory when the SQLite backend is selected.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the directory cannot be created.
        """
        if self.backend == "sqlite":
            try:
                self.database_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ConfigurationError(
                    f"Cannot create database directory: {exc}",
                    config_key="database_path",
                ) from exc
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        json_logs: Render logs as JSON.
        game: Rules engine settings.
        storage: Persistence settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="CURSEBOUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Cursebound",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Render logs as JSON",
    )

    game: GameSettings = Field(default_factory=GameSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "GameSettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
