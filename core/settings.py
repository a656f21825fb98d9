"""
Settings

Environment-driven configuration (a local .env file is read too). Field
names map to upper-case variables: DATABASE_URL, GOALIE_START_MINIMUM,
ROSTER_SOURCE and so on.
"""

from typing import Any, Literal, Optional

import pytz
from pydantic import Field, ImportString, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # peewee database URL
    database_url: str = "sqlite:///gshl.db"

    # League rules
    goalie_start_minimum: int = Field(default=2, ge=0)
    # A tied category count resolves as a home win. Pending product
    # confirmation; set False to record a tie as a loss for both sides.
    home_wins_ties: bool = True

    # Scrape scheduling
    league_timezone: str = "America/New_York"
    scrape_rollover_hour: int = Field(default=7, ge=0, le=23)  # before this hour we scrape yesterday
    enforce_scrape_windows: bool = True

    # Collaborators, as "package.module:attribute" import strings
    roster_source: Optional[ImportString[Any]] = None
    rater: Optional[ImportString[Any]] = None
    lineup_optimizer: Optional[ImportString[Any]] = None

    # Roster fetch retry and circuit breaker
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=2.0, ge=0)
    retry_max_delay: float = Field(default=30.0, ge=0)
    circuit_breaker_threshold: int = Field(default=5, ge=1)
    circuit_breaker_timeout: int = Field(default=60, ge=0)

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"
    service_name: str = "gshl-data-platform"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @field_validator("league_timezone")
    @classmethod
    def validate_league_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @property
    def league_tz(self):
        return pytz.timezone(self.league_timezone)


def get_settings() -> Settings:
    """Fresh settings read from the current environment (used by tests)."""
    return Settings()


settings = Settings()
