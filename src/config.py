import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    """Engine settings, read from PAYMENTS_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="PAYMENTS_", frozen=True)

    log_level: int = logging.WARNING
    report_stats: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def parse_log_level(cls, value):
        """Accept a level name (WARNING, debug) or a number."""
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if name.isdigit():
                return int(name)
            level = logging.getLevelName(name)
            if isinstance(level, int):
                return level
        raise ValueError(f"unknown log level {value!r}")
