"""Service settings, read from the environment (or a .env file) once per process."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    """Incident tracker configuration. Field names map to upper-case env vars."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Slack Web API
    slack_bot_token: str = ""
    slack_history_page_size: int = Field(default=100, ge=1, le=999)

    # Tier 2 budget shared by conversations.history and conversations.replies
    slack_rate_limit_max_requests: int = Field(default=20, ge=1)
    slack_rate_limit_window_seconds: float = Field(default=60.0, gt=0)
    slack_rate_limit_max_retries: int = Field(default=3, ge=0)

    database_url: str = "sqlite+aiosqlite:///./incident_tracker.db"

    # X-Api-Secret value required by mutating endpoints; empty locks them
    api_secret: str = ""

    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Build settings on first use so importing the app never requires env vars."""
    return Settings()
