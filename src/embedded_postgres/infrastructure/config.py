"""Configuration management for embedded Postgres."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from embedded_postgres.domain.value_objects.platform import PostgresVersion

DEFAULT_REPOSITORY_URL = "https://repo1.maven.org/maven2"


class BinaryConfig(BaseModel):
    """Which PostgreSQL binaries to use and where to download them from."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(default=PostgresVersion.V16.value, description="PostgreSQL version")
    operating_system: str | None = Field(
        default=None, description="Artifact operating system (detected when unset)"
    )
    architecture: str | None = Field(
        default=None, description="Artifact architecture (detected when unset)"
    )
    repository_url: str = Field(
        default=DEFAULT_REPOSITORY_URL, description="Maven repository hosting the binaries"
    )
    download_timeout_seconds: float = Field(
        default=120.0, gt=0, description="HTTP timeout for binary downloads"
    )


class PostgresConfig(BaseModel):
    """Server and bootstrap settings."""

    model_config = ConfigDict(frozen=True)

    port: int = Field(default=5432, ge=1, le=65535, description="Server port")
    database: str = Field(default="postgres", description="Application database name")
    username: str = Field(default="postgres", description="Superuser name")
    password: str = Field(default="postgres", description="Superuser password")
    locale: str | None = Field(default=None, description="initdb --locale")
    encoding: str | None = Field(default=None, description="initdb --encoding")
    start_parameters: dict[str, str] = Field(
        default_factory=dict, description="Extra server settings passed as -c key=value"
    )


class PathsConfig(BaseModel):
    """Filesystem locations. Unset paths are derived from the cache location at start."""

    model_config = ConfigDict(frozen=True)

    cache_path: Path | None = Field(default=None, description="Directory holding downloaded archives")
    runtime_path: Path | None = Field(default=None, description="Scratch directory for one run")
    data_path: Path | None = Field(default=None, description="PostgreSQL data directory")
    binaries_path: Path | None = Field(default=None, description="Where binaries are extracted")


class LifecycleConfig(BaseModel):
    """Start and stop timing."""

    model_config = ConfigDict(frozen=True)

    start_timeout_seconds: float = Field(default=15.0, gt=0, description="Start deadline")
    stop_timeout_seconds: float = Field(default=30.0, gt=0, description="Graceful stop timeout")
    probe_interval_seconds: float = Field(
        default=0.1, gt=0, description="Pause between readiness probes"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    model_config = ConfigDict(frozen=True)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(
        default="embedded_postgres", description="Service name for tracing"
    )


class Config(BaseSettings):
    """Main configuration for an embedded Postgres instance."""

    model_config = SettingsConfigDict(
        env_prefix="EMBEDDED_POSTGRES_",
        env_nested_delimiter="__",
        case_sensitive=False,
        frozen=True,
    )

    binary: BinaryConfig = Field(default_factory=BinaryConfig)
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
