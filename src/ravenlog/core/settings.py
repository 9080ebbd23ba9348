"""Centralized client configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files in the working directory: .env, .env.local

Credentials are optional at load time so that tooling (``ravenlog parse``,
``ravenlog encode``) works without a configured project; `Settings.credentials()`
is the point where missing values become a `ConfigError`.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts.credentials import Credentials
from .contracts.event import DEFAULT_LOGGER, DEFAULT_PLATFORM
from .errors import ConfigError

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_POOL_CAPACITY = 16
DEFAULT_TIMEOUT_SECONDS = 10.0


class Settings(BaseSettings):
    """Typed client configuration loaded from env and `.env` files.

    Attributes
    ----------
    log_level : LogLevelName
        Level of ravenlog's own diagnostic loggers; maps from `RAVENLOG_LOG_LEVEL`
        and is accepted in any case.
    ingestion_uri, public_key, private_key, project_id : Optional[str]
        Decoded DSN fields; map from `RAVENLOG_INGESTION_URI`, `RAVENLOG_PUBLIC_KEY`,
        `RAVENLOG_PRIVATE_KEY` and `RAVENLOG_PROJECT_ID`.
    logger : str
        Logger name stamped on every event; maps from `RAVENLOG_LOGGER`.
    platform : str
        Platform literal sent with every event; maps from `RAVENLOG_PLATFORM`.
    pool_capacity : int
        Number of transport handles, i.e. the maximum in-flight sends.
    timeout_seconds : float
        Socket timeout applied to each blocking network operation of a send;
        DNS resolution and the total exchange time are not bounded by it.
    """

    log_level: LogLevelName = Field(default="INFO", alias="RAVENLOG_LOG_LEVEL")

    ingestion_uri: str | None = Field(default=None, alias="RAVENLOG_INGESTION_URI")
    public_key: str | None = Field(default=None, alias="RAVENLOG_PUBLIC_KEY")
    private_key: str | None = Field(default=None, alias="RAVENLOG_PRIVATE_KEY")
    project_id: str | None = Field(default=None, alias="RAVENLOG_PROJECT_ID")

    logger: str = Field(default=DEFAULT_LOGGER, alias="RAVENLOG_LOGGER")
    platform: str = Field(default=DEFAULT_PLATFORM, alias="RAVENLOG_PLATFORM")
    pool_capacity: int = Field(default=DEFAULT_POOL_CAPACITY, ge=1, alias="RAVENLOG_POOL_CAPACITY")
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0.0, alias="RAVENLOG_TIMEOUT_SECONDS"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        # populate_by_name also reads each field name from the environment;
        # the prefix keeps that lookup inside the RAVENLOG_ namespace.
        env_prefix="RAVENLOG_",
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)

    def credentials(self) -> Credentials:
        """Return the configured credentials.

        Raises
        ------
        ConfigError
            If any of the four DSN fields is missing or empty.
        """
        try:
            return Credentials(
                ingestion_uri=self.ingestion_uri or "",
                public_key=self.public_key or "",
                private_key=self.private_key or "",
                project_id=self.project_id or "",
            )
        except ValidationError as exc:
            missing = ", ".join(str(e["loc"][0]) for e in exc.errors())
            raise ConfigError(f"Incomplete ravenlog credentials: {missing}") from exc


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "ravenlog") -> logging.Logger:
    """Return a process-global logger configured to `RAVENLOG_LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
