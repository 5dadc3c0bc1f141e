"""Inbound ports - the lifecycle API offered to host applications.

Defines the contract every embedded Postgres implementation honours and
the error taxonomy its callers can catch. Every error derives from
EmbeddedPostgresError so ``except EmbeddedPostgresError`` covers them all.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from embedded_postgres.domain.entities.process import PostgresStatus


# =============================================================================
# Lifecycle Port
# =============================================================================


class LifecyclePort(Protocol):
    """Protocol for managing one PostgreSQL server instance.

    Thread Safety:
        One instance must not be started or stopped from several threads
        at once. Separate instances may run concurrently provided they use
        distinct ports and data directories.
    """

    @property
    @abstractmethod
    def is_started(self) -> bool:
        """True between a successful start() and the next stop()."""
        ...

    @abstractmethod
    def start(self) -> None:
        """Acquire binaries, prepare the data directory and start the server.

        Blocks until the server accepts connections.

        Raises:
            AlreadyStartedError: If already started.
            PortUnavailableError: If the configured port is taken.
            AcquisitionError: If binaries cannot be downloaded or extracted.
            InitializationError: If initdb fails.
            SpawnError: If the server cannot be launched.
            DatabaseCreationError: If the application database cannot be created.
            StartupTimeoutError: If the server is not ready before the deadline.
            RollbackError: If a late failure could not be rolled back.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop the server gracefully.

        Raises:
            NotStartedError: If not started.
            StopError: If the server did not shut down.
        """
        ...

    @abstractmethod
    def status(self) -> PostgresStatus:
        """Report whether the server process is actually running.

        Raises:
            NotStartedError: If no run has been started yet.
            StatusError: If the status command cannot be launched.
        """
        ...


# =============================================================================
# Errors
# =============================================================================


class EmbeddedPostgresError(Exception):
    """Base class for all embedded Postgres failures."""

    pass


class AlreadyStartedError(EmbeddedPostgresError):
    """Raised when start() is called on a started instance."""

    def __init__(self) -> None:
        super().__init__("server is already started")


class NotStartedError(EmbeddedPostgresError):
    """Raised when stop() is called on an instance that is not started."""

    def __init__(self) -> None:
        super().__init__("server has not been started")


class PortUnavailableError(EmbeddedPostgresError):
    """Raised when something is already listening on the configured port."""

    def __init__(self, port: int) -> None:
        super().__init__(f"process already listening on port {port}")
        self.port = port


class AcquisitionError(EmbeddedPostgresError):
    """Raised when binaries cannot be downloaded or extracted."""

    pass


class InitializationError(EmbeddedPostgresError):
    """Raised when the data directory bootstrap (initdb) fails."""

    pass


class SpawnError(EmbeddedPostgresError):
    """Raised when the server process cannot be launched or dies during start."""

    pass


class StartupTimeoutError(EmbeddedPostgresError):
    """Raised when the server does not accept connections before the deadline."""

    pass


class DatabaseCreationError(EmbeddedPostgresError):
    """Raised when the application database cannot be created."""

    pass


class StopError(EmbeddedPostgresError):
    """Raised when the server does not shut down cleanly."""

    pass


class StatusError(EmbeddedPostgresError):
    """Raised when the status command cannot be launched."""

    pass


class RollbackError(EmbeddedPostgresError):
    """Raised when stopping the server after a failed start also fails.

    Both failures are kept: ``cause`` is what made start() give up and
    ``rollback_error`` is why the server could not be stopped afterwards.
    """

    def __init__(self, cause: BaseException, rollback_error: BaseException) -> None:
        super().__init__(
            f"unable to stop database after start failed: {cause}; "
            f"stop failed with: {rollback_error}"
        )
        self.cause = cause
        self.rollback_error = rollback_error


__all__ = [
    "LifecyclePort",
    "EmbeddedPostgresError",
    "AlreadyStartedError",
    "NotStartedError",
    "PortUnavailableError",
    "AcquisitionError",
    "InitializationError",
    "SpawnError",
    "StartupTimeoutError",
    "DatabaseCreationError",
    "StopError",
    "StatusError",
    "RollbackError",
]
