"""Application settings and configuration management."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from lingua.domain.duplicates.models.duplicate_models import PRESET_NAMES

# Look for a .env file in the project root, then the working directory
_project_env = Path(__file__).parent.parent.parent / ".env"
if _project_env.exists():
    load_dotenv(_project_env)
else:
    load_dotenv(".env", verbose=False)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Storage
    database_path: str = Field(default="data/lingua.db", alias="LINGUA_DATABASE_PATH")
    cards_json_path: str = Field(
        default="data/cards.json", alias="LINGUA_CARDS_JSON_PATH"
    )

    # Practice
    active_language: str | None = Field(default=None, alias="LINGUA_ACTIVE_LANGUAGE")
    multiple_choice_options: int = Field(
        default=4, ge=2, alias="LINGUA_MULTIPLE_CHOICE_OPTIONS"
    )
    min_multiple_choice_pool: int = Field(
        default=4, ge=2, alias="LINGUA_MIN_MULTIPLE_CHOICE_POOL"
    )

    # Scheduling (days)
    base_interval_days: float = Field(
        default=1.0, gt=0, alias="LINGUA_BASE_INTERVAL_DAYS"
    )
    streak_factor: float = Field(default=2.0, ge=0, alias="LINGUA_STREAK_FACTOR")
    retry_interval_days: float = Field(
        default=1.0, gt=0, alias="LINGUA_RETRY_INTERVAL_DAYS"
    )
    max_interval_days: float = Field(
        default=365.0, gt=0, alias="LINGUA_MAX_INTERVAL_DAYS"
    )

    # Duplicate detection
    duplicate_preset: str = Field(default="standard", alias="LINGUA_DUPLICATE_PRESET")

    # Logging
    log_level: str = Field(default="INFO", alias="LINGUA_LOG_LEVEL")
    log_file: str = Field(default="", alias="LINGUA_LOG_FILE")

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("duplicate_preset")
    @classmethod
    def validate_duplicate_preset(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in PRESET_NAMES:
            raise ValueError(
                f"duplicate_preset must be one of {', '.join(PRESET_NAMES)}"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return v

    @field_validator("active_language")
    @classmethod
    def empty_language_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


def get_settings() -> Settings:
    """Get a fresh application settings instance."""
    return Settings()
