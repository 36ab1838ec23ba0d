"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .rules import DEFAULT_AUTHOR, DEFAULT_CATEGORY, INITIAL_CATEGORIES


class Settings(BaseSettings):
    """Settings loaded from ``PROMPTPAD_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="PROMPTPAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    store_path: str = "promptpad_store.json"

    # Record defaults
    default_author: str = DEFAULT_AUTHOR
    default_category: str = DEFAULT_CATEGORY
    # Sentinel for imported rows without a category ("Imported" is also common)
    import_category: str = DEFAULT_CATEGORY
    initial_categories: list[str] = list(INITIAL_CATEGORIES)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
