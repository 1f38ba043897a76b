"""Framework settings powered by Pydantic BaseSettings."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from treeconf.constants import SETTINGS_ENV_PREFIX


class TreeconfSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix=SETTINGS_ENV_PREFIX,
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalise the level name and reject unknown levels."""
        name = value.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {value}")
        return name

    def log_level_number(self) -> int:
        """Return the numeric logging level."""
        level: int = logging.getLevelName(self.log_level)
        return level


def get_settings() -> TreeconfSettings:
    """Get a settings instance."""
    return TreeconfSettings()
