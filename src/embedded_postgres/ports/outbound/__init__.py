"""Outbound ports - External collaborator interfaces.

The lifecycle orchestration depends on these narrow contracts for
everything that touches the network, archives, executables or the SQL
wire protocol. Adapters in ``embedded_postgres.adapters.outbound``
implement them; tests substitute in-memory doubles.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import BinaryIO, Protocol

from embedded_postgres.domain.entities.process import PostgresStatus
from embedded_postgres.domain.value_objects import BinaryTarget, Deadline


# =============================================================================
# Binary Acquisition Ports
# =============================================================================


class RemoteFetcher(Protocol):
    """Protocol for downloading a binary archive into the cache."""

    @abstractmethod
    def fetch(self, target: BinaryTarget, cache_location: Path) -> Path:
        """Download the archive for ``target`` to ``cache_location``.

        The archive must only appear at ``cache_location`` once it has been
        written completely.

        Args:
            target: Version, OS and architecture to download.
            cache_location: Final archive path.

        Returns:
            The archive path.

        Raises:
            Exception: Any download failure; the cache wraps it.
        """
        ...


class Extractor(Protocol):
    """Protocol for unpacking a binary archive."""

    @abstractmethod
    def extract(self, archive: Path, destination: Path) -> None:
        """Unpack ``archive`` into ``destination``.

        ``destination/bin`` must only exist once extraction has completed.
        """
        ...


# =============================================================================
# Server Ports
# =============================================================================


class DatabaseInitializer(Protocol):
    """Protocol for bootstrapping a fresh data directory (initdb)."""

    @abstractmethod
    def init(
        self,
        binaries_path: Path,
        runtime_path: Path,
        data_path: Path,
        username: str,
        password: str,
        locale: str | None,
        encoding: str | None,
        log_file: BinaryIO,
    ) -> None:
        """Create a cluster in ``data_path``.

        Raises:
            InitializationError: If the bootstrap command fails.
        """
        ...


class ProcessController(Protocol):
    """Protocol for running the server as a child process."""

    @abstractmethod
    def start(self, deadline: Deadline) -> None:
        """Spawn the server. Does not wait for readiness.

        Raises:
            SpawnError: If the process cannot be launched.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Shut the server down and wait for it to exit.

        Raises:
            StopError: If the server does not exit.
        """
        ...

    @abstractmethod
    def status(self) -> PostgresStatus:
        """Query the server status.

        Raises:
            StatusError: If the status command cannot be launched.
        """
        ...

    @abstractmethod
    def is_alive(self) -> bool:
        """True while the spawned child has not exited."""
        ...


class DatabaseCreator(Protocol):
    """Protocol for creating the application database on a fresh cluster."""

    @abstractmethod
    def create_database(
        self,
        deadline: Deadline,
        port: int,
        username: str,
        password: str,
        database: str,
    ) -> None:
        """Create ``database``. The server may still be starting up.

        Raises:
            DatabaseCreationError: If the database cannot be created.
        """
        ...


class HealthProbeError(Exception):
    """Raised by a health probe when one connection attempt fails."""

    pass


class HealthProbe(Protocol):
    """Protocol for a single readiness check. Retrying is the caller's job."""

    @abstractmethod
    def probe(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        database: str,
        timeout_seconds: float | None = None,
    ) -> None:
        """Attempt one connection.

        ``timeout_seconds`` bounds the attempt; implementations round it to
        whatever granularity their client supports.

        Raises:
            HealthProbeError: If the server does not answer correctly.
        """
        ...


__all__ = [
    "RemoteFetcher",
    "Extractor",
    "DatabaseInitializer",
    "ProcessController",
    "DatabaseCreator",
    "HealthProbe",
    "HealthProbeError",
]
