"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ROUTINE_STREAKS_", env_file=".env", extra="ignore")

    # IANA zone deciding which calendar day "today" is and which day each
    # completion falls on.
    TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"

    DEMO_COMPLETIONS: str = "examples/sample_completions.csv"
    DEMO_ROUTINES: str = "examples/sample_routines.json"

    @field_validator("TIMEZONE")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown time zone '{value}'") from exc
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.TIMEZONE)

    def current_date(self) -> date:
        return today_in(self.zone)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def today_in(tz: tzinfo) -> date:
    return datetime.now(tz).date()
