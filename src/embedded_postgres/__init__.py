"""
Embedded Postgres - Disposable PostgreSQL instances for Python processes

Downloads the PostgreSQL server binaries, initializes a data directory,
runs the server as a child process and tears it down cleanly.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"

from embedded_postgres.application.embedded_postgres import EmbeddedPostgres
from embedded_postgres.domain.value_objects.platform import PostgresVersion
from embedded_postgres.infrastructure.config import Config, get_config
from embedded_postgres.ports.inbound import (
    AcquisitionError,
    AlreadyStartedError,
    DatabaseCreationError,
    EmbeddedPostgresError,
    InitializationError,
    NotStartedError,
    PortUnavailableError,
    RollbackError,
    SpawnError,
    StartupTimeoutError,
    StatusError,
    StopError,
)

__all__ = [
    "EmbeddedPostgres",
    "PostgresVersion",
    "Config",
    "get_config",
    "EmbeddedPostgresError",
    "AcquisitionError",
    "AlreadyStartedError",
    "DatabaseCreationError",
    "InitializationError",
    "NotStartedError",
    "PortUnavailableError",
    "RollbackError",
    "SpawnError",
    "StartupTimeoutError",
    "StatusError",
    "StopError",
]
