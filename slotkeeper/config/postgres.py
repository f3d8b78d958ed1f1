"""
slotkeeper.config.postgres – PostgreSQL connection config (dataclass + validators).

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT,
DB_POOL_RECYCLE, DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from slotkeeper.config._validators import env_bool, positive_int

_DEFAULT_URL = "postgresql://localhost/slotkeeper"
_DEFAULT_APP_NAME = "slotkeeper"


def _validate_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise ValueError("DATABASE_URL is required and must be non-empty")
    if not url.startswith(("postgresql://", "postgres://", "postgresql+asyncpg://")):
        raise ValueError(
            "DATABASE_URL must start with postgresql://, postgres:// "
            "or postgresql+asyncpg://"
        )
    return url


@dataclass(frozen=True)
class PostgresConfig:
    """
    Connection and pool settings for the appointment store.

    Use load_postgres_config() to build from environment variables.
    """

    url: str
    """DSN; rewritten to postgresql+asyncpg:// by the engine."""

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    """Seconds to wait for a pooled connection."""

    pool_recycle: int = 1800
    echo: bool = False
    """Log SQL statements (debug)."""

    application_name: str = _DEFAULT_APP_NAME

    def __post_init__(self) -> None:
        _validate_url(self.url)
        positive_int(self.pool_size, "pool_size")
        positive_int(self.max_overflow, "max_overflow", min_val=0)
        positive_int(self.pool_timeout, "pool_timeout")
        positive_int(self.pool_recycle, "pool_recycle")
        if not isinstance(self.echo, bool):
            raise ValueError("echo must be a boolean")
        if not isinstance(self.application_name, str) or not self.application_name.strip():
            raise ValueError("application_name must be a non-empty string")

    @classmethod
    def from_env(cls, **overrides: object) -> PostgresConfig:
        """
        Build config from environment variables.

        Env:
            DATABASE_URL          – default postgresql://localhost/slotkeeper
            DB_POOL_SIZE          – default 10
            DB_MAX_OVERFLOW       – default 20
            DB_POOL_TIMEOUT       – default 30
            DB_POOL_RECYCLE       – default 1800
            DB_ECHO               – "1" / "true" / "yes" → True
            DB_APPLICATION_NAME   – default slotkeeper

        Overrides (keyword args) take precedence over env.
        """
        raw_url = overrides.get("url")
        if raw_url is None:
            raw_url = os.environ.get("DATABASE_URL", _DEFAULT_URL)

        env_ints = {
            "pool_size": ("DB_POOL_SIZE", 10),
            "max_overflow": ("DB_MAX_OVERFLOW", 20),
            "pool_timeout": ("DB_POOL_TIMEOUT", 30),
            "pool_recycle": ("DB_POOL_RECYCLE", 1800),
        }
        ints = {}
        for attr, (var, default) in env_ints.items():
            value = overrides.get(attr)
            ints[attr] = int(value) if value is not None else int(os.environ.get(var, default))

        echo = overrides.get("echo")
        app_name = overrides.get("application_name") or os.environ.get(
            "DB_APPLICATION_NAME", _DEFAULT_APP_NAME
        )
        return cls(
            url=_validate_url(str(raw_url)),
            echo=env_bool("DB_ECHO", False) if echo is None else bool(echo),
            application_name=str(app_name),
            **ints,
        )


def load_postgres_config(**overrides: object) -> PostgresConfig:
    """
    Load and validate PostgreSQL config from environment (with optional overrides).

    Raises ValueError on invalid env/values.
    """
    return PostgresConfig.from_env(**overrides)
