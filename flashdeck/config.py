"""
Configuration settings for flashdeck.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a ``FLASHDECK_`` prefixed environment variable.
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
        env_prefix="FLASHDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    database_path: str = Field(
        default=str(Path.home() / ".flashdeck" / "collection.db"),
        description="SQLite collection path (':memory:' for an ephemeral store)",
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

    # ========================================
    # SM-2 Scheduler
    # ========================================
    initial_easiness: float = Field(
        default=2.5,
        description="Easiness factor given to a card on its first answer",
    )
    minimum_easiness: float = Field(
        default=1.3,
        description="Lower bound for the easiness factor",
    )
    first_interval: int = Field(
        default=1,
        ge=1,
        description="Days until the first review after graduating from learning",
    )
    easy_interval: int = Field(
        default=4,
        ge=1,
        description="Days until the first review when a new card is answered Easy",
    )
    hard_factor: float = Field(
        default=1.2,
        gt=0,
        description="Interval multiplier for Hard answers on review cards",
    )
    easy_bonus: float = Field(
        default=1.3,
        ge=1.0,
        description="Extra interval multiplier for Easy answers on review cards",
    )

    def get_scheduler_config(self) -> dict[str, float | int]:
        """Get SM-2 scheduler parameters as a dictionary."""
        return {
            "initial_easiness": self.initial_easiness,
            "minimum_easiness": self.minimum_easiness,
            "first_interval": self.first_interval,
            "easy_interval": self.easy_interval,
            "hard_factor": self.hard_factor,
            "easy_bonus": self.easy_bonus,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
