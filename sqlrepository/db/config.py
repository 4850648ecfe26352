from __future__ import annotations

import re
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Async driver markers that a synchronous engine cannot load.
_ASYNC_DRIVERS = ("asyncpg", "aiosqlite", "aiomysql", "asyncmy", "psycopg_async")


class Settings(BaseSettings):
    """
    Database settings for the repository adapter.

    Reads from environment variables (or .env via pydantic-settings):
      - DATABASE_URL (full SQLAlchemy URL, takes precedence)
      - DB_DRIVER, DB_USER, DB_PASSWORD, DB_HOST, DB_PORT, DB_NAME
    """

    DATABASE_URL: Optional[str] = Field(
        default=None, description="If provided, full SQLAlchemy database URL."
    )
    DB_DRIVER: str = Field(
        default="postgresql", description="SQLAlchemy dialect[+driver] name"
    )
    DB_USER: Optional[str] = Field(default=None, description="DB username")
    DB_PASSWORD: Optional[str] = Field(default=None, description="DB password")
    DB_NAME: Optional[str] = Field(default=None, description="Database name")
    DB_HOST: Optional[str] = Field(
        default="localhost", description="Database host (default localhost)"
    )
    DB_PORT: Optional[int] = Field(default=None, description="Database port")

    # SQLAlchemy engine options
    SQL_ECHO: bool = Field(
        default=False, description="Echo SQL statements for debugging (default False)"
    )
    POOL_PRE_PING: bool = Field(
        default=True, description="Test pooled connections before handing them out"
    )

    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def database_url(self) -> str:
        """
        Return DATABASE_URL if present, otherwise compose a URL from the
        individual DB_* variables.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if not self.DB_NAME:
            raise ValueError(
                "Database configuration missing. Ensure DATABASE_URL or "
                "DB_NAME (with DB_USER/DB_PASSWORD as needed) is set in the environment."
            )
        credentials = ""
        if self.DB_USER:
            credentials = self.DB_USER
            if self.DB_PASSWORD:
                credentials += f":{self.DB_PASSWORD}"
            credentials += "@"
        host = self.DB_HOST or "localhost"
        port = f":{self.DB_PORT}" if self.DB_PORT else ""
        return f"{self.DB_DRIVER}://{credentials}{host}{port}/{self.DB_NAME}"

    @property
    def sync_database_url(self) -> str:
        """
        The adapter runs on a synchronous engine, so any async driver tag is
        dropped and the dialect's default DBAPI is used instead.
        """
        url = self.database_url
        pattern = r"^(\w+)\+(?:%s)://" % "|".join(_ASYNC_DRIVERS)
        return re.sub(pattern, r"\1://", url)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return a settings object populated from the current environment."""
    return Settings()
