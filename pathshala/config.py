"""
Configuration settings for the pathshala engine.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are read with the PATHSHALA_ prefix (e.g. PATHSHALA_DATA_DIR).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PATHSHALA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".pathshala",
        description="Directory holding the local record database",
    )
    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL for the record store (defaults to SQLite in data_dir)",
    )
    store_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for a single backing-storage call",
    )

    # ========================================
    # Practice
    # ========================================
    distractor_count: int = Field(
        default=4,
        ge=1,
        description="Multiple-choice options shown per problem (answer included)",
    )
    distractor_max_attempts: int = Field(
        default=1000,
        ge=1,
        description="Random draws before padding options deterministically",
    )

    # ========================================
    # Analytics
    # ========================================
    activity_window_days: int = Field(
        default=7,
        ge=0,
        description="Default look-back window for recent activity",
    )
    streak_window_days: int = Field(
        default=30,
        ge=1,
        description="Look-back window used to compute learning streaks",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def get_database_url(self) -> str:
        """Resolve the record store URL, falling back to a SQLite file in data_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / 'records.db'}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
