"""Environment configuration management."""

import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from filetwin.file_monitor import DEFAULT_DEBOUNCE_SECONDS
from filetwin.utils.logging import configure_logging
from filetwin.utils.rich_console import LOG_LEVELS


class EnvironmentError(Exception):
    """Base exception for environment configuration errors."""

    pass


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


class EnvironmentConfig(BaseModel):
    """Runtime settings read from the environment (and an optional .env file)."""

    FILETWIN_DEBUG: bool = Field(False, description="Enable debug logging")
    FILETWIN_LOG_LEVEL: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    FILETWIN_LOG_FILE: Optional[str] = Field(None, description="Also write log lines to this file")
    FILETWIN_DEBOUNCE_SECONDS: float = Field(
        DEFAULT_DEBOUNCE_SECONDS,
        ge=0,
        description="Quiet period before a burst of writes to one file is handled",
    )

    @field_validator("FILETWIN_LOG_LEVEL")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return value

    @property
    def log_level(self) -> str:
        """Effective level: debug mode forces DEBUG."""
        return "DEBUG" if self.FILETWIN_DEBUG else self.FILETWIN_LOG_LEVEL

    @classmethod
    def load(cls, dotenv: bool = True) -> "EnvironmentConfig":
        """Load environment configuration from environment variables.

        Args:
            dotenv: Read a .env file from the working directory first

        Raises:
            EnvironmentError: If a variable holds an invalid value
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        env_vars = {}
        if "FILETWIN_DEBUG" in os.environ:
            env_vars["FILETWIN_DEBUG"] = _parse_bool(os.environ["FILETWIN_DEBUG"])
        for name in ("FILETWIN_LOG_LEVEL", "FILETWIN_LOG_FILE", "FILETWIN_DEBOUNCE_SECONDS"):
            if os.environ.get(name):
                env_vars[name] = os.environ[name]

        try:
            config = cls(**env_vars)
        except ValidationError as e:
            raise EnvironmentError(f"Invalid environment configuration: {e}") from e

        # Configure loguru (used for debug timing) at the same level
        configure_logging(config.log_level)

        return config

