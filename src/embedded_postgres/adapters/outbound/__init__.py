"""Outbound adapters - implementations of outbound ports.

These adapters touch the outside world: TCP ports, the Maven repository,
tar.xz archives, the PostgreSQL executables and the SQL wire protocol.
"""

from embedded_postgres.adapters.outbound.binary_cache import (
    AcquisitionSource,
    BinaryCache,
    CacheLocator,
    KeyedLock,
    default_acquisition_locks,
)
from embedded_postgres.adapters.outbound.initdb import InitDbInitializer
from embedded_postgres.adapters.outbound.port_guard import ensure_port_available
from embedded_postgres.adapters.outbound.postgres_process import PostgresProcess
from embedded_postgres.adapters.outbound.psycopg_probe import (
    PsycopgDatabaseCreator,
    PsycopgHealthProbe,
)
from embedded_postgres.adapters.outbound.remote_fetch import MavenRemoteFetcher, RemoteFetchError
from embedded_postgres.adapters.outbound.tar_xz import TarXzExtractor

__all__ = [
    "AcquisitionSource",
    "BinaryCache",
    "CacheLocator",
    "KeyedLock",
    "default_acquisition_locks",
    "InitDbInitializer",
    "ensure_port_available",
    "PostgresProcess",
    "PsycopgDatabaseCreator",
    "PsycopgHealthProbe",
    "MavenRemoteFetcher",
    "RemoteFetchError",
    "TarXzExtractor",
]
