"""Configuration module for the outfitter contract service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from outfitter.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    JWT_SECRET: str
    JWT_ACCESS_TTL_MINUTES: int
    HUNT_CODES_CSV_PATH: str | None
    SEASON_LOOKUP_URL: str | None
    SEASON_LOOKUP_TIMEOUT_SECONDS: float
    PLATFORM_FEE_PERCENT: float
    PLATFORM_FEE_MIN_CENTS: int
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=False)
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    config = Config(
        APP_NAME="Outfitter Contracts",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./outfitter.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"),
            default=(resolved_env == "production"),
        ),
        JWT_SECRET=os.getenv("JWT_SECRET", "change_me_jwt_secret"),
        JWT_ACCESS_TTL_MINUTES=int(os.getenv("JWT_ACCESS_TTL_MINUTES", "60")),
        HUNT_CODES_CSV_PATH=os.getenv("HUNT_CODES_CSV_PATH") or None,
        SEASON_LOOKUP_URL=os.getenv("SEASON_LOOKUP_URL") or None,
        SEASON_LOOKUP_TIMEOUT_SECONDS=float(os.getenv("SEASON_LOOKUP_TIMEOUT_SECONDS", "3")),
        PLATFORM_FEE_PERCENT=float(os.getenv("PLATFORM_FEE_PERCENT", "5")),
        PLATFORM_FEE_MIN_CENTS=int(os.getenv("PLATFORM_FEE_MIN_CENTS", "50")),
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", redis_url),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", redis_url),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.JWT_ACCESS_TTL_MINUTES < 1:
        raise ConfigurationError("JWT_ACCESS_TTL_MINUTES must be >= 1.")
    if config.SEASON_LOOKUP_TIMEOUT_SECONDS <= 0:
        raise ConfigurationError("SEASON_LOOKUP_TIMEOUT_SECONDS must be > 0.")
    if not 0 <= config.PLATFORM_FEE_PERCENT <= 100:
        raise ConfigurationError("PLATFORM_FEE_PERCENT must be between 0 and 100.")
    if config.PLATFORM_FEE_MIN_CENTS < 0:
        raise ConfigurationError("PLATFORM_FEE_MIN_CENTS must be >= 0.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.JWT_SECRET.lower():
        raise ConfigurationError("Production JWT_SECRET uses placeholder value.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
