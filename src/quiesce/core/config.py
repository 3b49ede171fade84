"""Engine configuration using Pydantic Settings.

Settings are read from environment variables prefixed with ``QUIESCE_``
(or a local ``.env`` file), so CI pipelines can tune the stabilization
bound and logging without touching test code.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Stabilization engine settings with validation.

    All settings can be overridden via environment variables, e.g.
    ``QUIESCE_MAX_ATTEMPTS=50``.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUIESCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Stabilization loop
    max_attempts: int = Field(
        default=30,
        ge=1,
        le=10000,
        description="Maximum loop iterations before giving up on stabilization",
    )
    iteration_ms: int = Field(
        default=1000,
        ge=0,
        description="Virtual milliseconds to advance the clock per step",
    )

    # Runaway-timer guard
    warn_on_repeating_timers: bool = Field(
        default=True,
        description="Log a warning with call-site trace for each repeating timer",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str) -> str:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached engine settings.

    Uses lru_cache to ensure settings are only loaded once per process.
    Call ``get_settings.cache_clear()`` after changing the environment.

    Returns:
        Settings: Engine settings instance.
    """
    return Settings()
