"""Centralized configuration management for the movie favorites app."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so CLI entry points and the API observe the same values.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/favorites.db"
SQLITE_ASYNC_PREFIX = "sqlite+aiosqlite://"
SQLITE_SYNC_PREFIX = "sqlite://"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_TMDB_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"
DEFAULT_HTTP_TIMEOUT_SECONDS = 20.0
DEFAULT_LOG_LEVEL = "INFO"

StoreBackend = Literal["sql", "memory"]


def normalize_database_url(url: str) -> str:
    """Return ``url`` rewritten to the async driver SQLAlchemy should use.

    Synchronous SQLite and PostgreSQL URLs are upgraded to ``aiosqlite`` and
    ``psycopg`` respectively.  Anything else is rejected so misconfigured
    deployments fail at startup instead of on the first favorite.
    """

    normalized = url.strip()
    if not normalized:
        raise RuntimeError(
            "DATABASE_URL is set but empty. Provide a SQLite or PostgreSQL URL."
        )

    if normalized.startswith(SQLITE_ASYNC_PREFIX) or normalized.startswith(
        POSTGRES_ASYNC_PREFIX
    ):
        return normalized

    if normalized.startswith(SQLITE_SYNC_PREFIX):
        return normalized.replace(SQLITE_SYNC_PREFIX, SQLITE_ASYNC_PREFIX, 1)

    for prefix in POSTGRES_SYNC_PREFIXES:
        if normalized.startswith(prefix):
            return normalized.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

    raise RuntimeError(
        f"Expected a SQLite or PostgreSQL connection string, received: {url}"
    )


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Values come from the environment (or a local ``.env`` file).  Helper
    properties expose the normalised database URL and logging level so the
    container, CLI, and API never repeat parsing logic.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "SQLAlchemy database URL for the favorites store. Defaults to a local"
            " SQLite file; sync SQLite/PostgreSQL URLs are upgraded to async drivers."
        ),
    )
    store_backend: StoreBackend = Field(
        default="sql",
        alias="STORE_BACKEND",
        description=(
            "Persistence implementation selected at startup: 'sql' for the"
            " database-backed store, 'memory' for an ephemeral in-process store."
        ),
    )
    tmdb_api_key: str | None = Field(
        default=None,
        alias="TMDB_API_KEY",
        description="API key sent with every TMDB catalog request.",
    )
    tmdb_base_url: str = Field(
        default=DEFAULT_TMDB_BASE_URL,
        alias="TMDB_BASE_URL",
        description="Root URL of the TMDB v3 API.",
    )
    poster_base_url: str = Field(
        default=DEFAULT_POSTER_BASE_URL,
        alias="TMDB_POSTER_BASE_URL",
        description="Prefix prepended to TMDB poster paths.",
    )
    http_timeout_seconds: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        alias="HTTP_TIMEOUT_SECONDS",
        gt=0,
        description="Timeout applied to outbound catalog requests.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of additional CORS origins.",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL
        return normalize_database_url(self.database_url)

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            origin.strip().rstrip("/")
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self.tmdb_api_key:
            warnings.append(
                "TMDB_API_KEY is not set - catalog requests will be rejected upstream"
            )

        if self.store_backend == "memory":
            warnings.append(
                "STORE_BACKEND is 'memory' - favorites are lost when the process exits"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_POSTER_BASE_URL",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_TMDB_BASE_URL",
    "POSTGRES_ASYNC_PREFIX",
    "StoreBackend",
    "get_settings",
    "normalize_database_url",
]
