"""Configuration via pydantic-settings, 12-factor app style."""
from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """tidc configuration, loaded from env vars / .env file.

    An unknown decoder name fails validation here, before any line is read.
    """

    model_config = SettingsConfigDict(env_prefix="TIDC_", env_file=".env", extra="ignore")

    decoder: Literal["uniformed-log", "zap-object"] = Field(
        default="uniformed-log", description="Decoder mode (uniformed-log|zap-object)"
    )
    on_error: Literal["fail", "skip"] = Field(
        default="fail", description="What to do with a line that cannot be decoded"
    )
    workers: int = Field(default=1, ge=0, description="Worker processes for file input (0 = all cores)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Level for diagnostics on stderr"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


settings = Settings()
