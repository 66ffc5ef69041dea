"""
Process-level settings shared by every settings class.

Values come from the environment first and a local .env file second.

Dependencies: pydantic, pydantic_settings
System role: Root of the settings hierarchy
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Log verbosity shared by the aggregate settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level name passed to configure_logging",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()
