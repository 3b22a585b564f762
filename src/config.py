from __future__ import annotations

from functools import cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    database_url: str = "sqlite:///stockbook.db"
    decimal_precision: int = 34
    check_ordering: bool = False
    default_period: Literal["day", "month"] = "day"
    display_places: int = 2
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="STOCKBOOK_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@cache
def config() -> AppSettings:
    return AppSettings()
