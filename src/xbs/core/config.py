"""Configuration management for xbs.

This module uses Pydantic Settings to load and validate configuration from
environment variables, .env files and an optional YAML config file
(``xbs.yml`` by default). Configuration is loaded at startup and is
immutable during runtime.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE_ENV = "XBS_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "./xbs.yml"

# Keys of the original xBrowserSync server config file and their settings names
LEGACY_CONFIG_KEYS = {
    "db": "database_url",
    "sslport": "ssl_port",
    "key": "ssl_keyfile",
    "cert": "ssl_certfile",
    "log": "log_file",
    "loglevel": "log_level",
}


class XbsYamlSettingsSource(YamlConfigSettingsSource):
    """YAML source that also understands the original server's xbs.yml.

    Legacy keys are renamed to their settings names; a bare ``db`` path
    becomes an aiosqlite URL. Settings names win when a file has both.
    """

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        data = super()._read_file(file_path)
        for legacy_key, name in LEGACY_CONFIG_KEYS.items():
            if legacy_key in data:
                data.setdefault(name, data.pop(legacy_key))

        database_url = data.get("database_url")
        if isinstance(database_url, str) and "://" not in database_url:
            data["database_url"] = f"sqlite+aiosqlite:///{database_url}"
        return data


class Settings(BaseSettings):
    """Application configuration settings.

    Sources, highest precedence first: init kwargs, environment variables
    (``XBS_`` prefix), .env file, YAML config file, field defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="XBS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "xbs"
    app_version: str = "1.1.13"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # TLS Settings (all three or none)
    ssl_port: int | None = None
    ssl_keyfile: str | None = None
    ssl_certfile: str | None = None

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./xbs_data/xbs.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # SQLite Pragmas
    db_sqlite_journal_mode: str = "WAL"
    db_sqlite_synchronous: str = "NORMAL"
    db_sqlite_busy_timeout: int = 5000  # 5 seconds

    # CORS Settings
    cors_origins: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"
    log_file: str | None = None

    # Sync Service Settings
    max_sync_size: int = Field(
        default=512000,
        description="Maximum accepted bookmarks payload size in bytes",
    )
    allow_new_syncs: bool = Field(
        default=True,
        description="When disabled, requests to create new bookmarks are refused",
    )
    service_message: str = ""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the YAML config file below env vars and above defaults."""
        yaml_file = os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            XbsYamlSettingsSource(settings_cls, yaml_file=yaml_file),
            file_secret_settings,
        )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case (``debug``, ``Info``...)."""
        if isinstance(v, str):
            v = v.upper()
            # Level names of the original server
            if v == "WARN":
                return "WARNING"
            if v in ("FATAL", "UNKNOWN"):
                return "CRITICAL"
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

    @property
    def ssl_enabled(self) -> bool:
        """Check if a TLS listener is configured."""
        return self.ssl_port is not None

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.is_sqlite:
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self

    @model_validator(mode="after")
    def validate_ssl(self) -> "Settings":
        """Validate that ssl_port, ssl_keyfile and ssl_certfile come together."""
        ssl_values = (self.ssl_port, self.ssl_keyfile, self.ssl_certfile)
        if any(v is not None for v in ssl_values) and not all(
            v is not None for v in ssl_values
        ):
            raise ValueError(
                "ssl_port, ssl_keyfile and ssl_certfile must be configured together"
            )
        return self

    @property
    def database_url_sync(self) -> str:
        """Get synchronous database URL for migrations."""
        url = self.database_url
        if url.startswith("sqlite+aiosqlite"):
            return url.replace("sqlite+aiosqlite", "sqlite")
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql")
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once per process. Call ``get_settings.cache_clear()``
    after changing ``XBS_CONFIG_FILE`` to reload them.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
