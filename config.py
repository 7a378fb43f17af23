"""
Configuration settings for the mastery analytics engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///./mastery_engine.db",
        description="SQLAlchemy connection string for the attempt log",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Confidence Scoring
    # ========================================
    confidence_window: int = Field(
        default=20,
        description="Most recent attempts fed to the confidence score",
    )
    confidence_accuracy_weight: float = Field(
        default=0.7,
        description="Weight of mean accuracy in the confidence score",
    )
    confidence_speed_weight: float = Field(
        default=0.3,
        description="Weight of median speed ratio in the confidence score",
    )

    # ========================================
    # Micro-Cycles
    # ========================================
    cycle_size: int = Field(
        default=5,
        description="Attempts per mastery evaluation cycle",
    )
    cycle_scope: Literal["subject", "topic"] = Field(
        default="subject",
        description="Scope of the last-N query used for cycle summaries",
    )
    mastery_accuracy_threshold: float = Field(
        default=0.85,
        description="Cycle accuracy required for mastery",
    )

    # ========================================
    # Difficulty -> Expected Response Time
    # ========================================
    difficulty_easy_seconds: float = Field(
        default=40,
        description="Expected seconds for an easy question",
    )
    difficulty_medium_seconds: float = Field(
        default=70,
        description="Expected seconds for a medium question (also the fallback)",
    )
    difficulty_hard_seconds: float = Field(
        default=110,
        description="Expected seconds for a hard question",
    )

    # ========================================
    # Pomodoro Scheduling
    # ========================================
    peak_min_attempts: int = Field(
        default=15,
        description="Historical attempts required before peak time is trusted",
    )
    schedule_recent_window: int = Field(
        default=10,
        description="Recent attempts used for fatigue / momentum detection",
    )
    schedule_min_recent: int = Field(
        default=5,
        description="Minimum recent attempts before fatigue / momentum apply",
    )

    def get_difficulty_seconds(self) -> dict[str, float]:
        """Get the difficulty -> expected seconds mapping."""
        return {
            "easy": self.difficulty_easy_seconds,
            "medium": self.difficulty_medium_seconds,
            "hard": self.difficulty_hard_seconds,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
