"""Environment-driven configuration for the planner service.

Every tunable lives on ``AppSettings`` so the timeline geometry, dashboard
thresholds and storage location can be changed without touching code. Values
are read once from the environment (and ``.env`` files) when the module is
first imported.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Ticket Planner"
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    TZ: str = "UTC"
    LOG_LEVEL: str = "INFO"

    API_KEY: str = Field(default="", validation_alias=AliasChoices("API_KEY", "API_TOKEN"))

    DB_URL: str = Field(
        default="",
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL"),
    )

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    # ---- Timeline geometry (pixels)
    DAY_WIDTH: int = 40
    ROW_HEIGHT: int = 50
    BAR_HEIGHT: int = 32
    RANGE_PADDING_DAYS: int = 2
    EMPTY_RANGE_DAYS: int = 30

    # ---- Dashboard
    DUE_SOON_THRESHOLD_DAYS: int = 7
    MAX_DISPLAYED_ASSIGNEES: int = 3

    @field_validator("DAY_WIDTH", "ROW_HEIGHT", "BAR_HEIGHT")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("timeline dimensions must be positive")
        return value

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> str:
        return str(value or "INFO").strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    if not settings.DB_URL:
        # Default to a SQLite file under DATA_DIR so a fresh checkout boots.
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'planner.db'}"
    return settings


settings = get_settings()
