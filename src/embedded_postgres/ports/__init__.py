"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: the lifecycle API offered to host applications
- Outbound ports: collaborators for downloads, archives, executables and probes

Adapters implement these ports with concrete functionality.
"""

from embedded_postgres.ports.inbound import (
    AcquisitionError,
    AlreadyStartedError,
    DatabaseCreationError,
    EmbeddedPostgresError,
    InitializationError,
    LifecyclePort,
    NotStartedError,
    PortUnavailableError,
    RollbackError,
    SpawnError,
    StartupTimeoutError,
    StatusError,
    StopError,
)
from embedded_postgres.ports.outbound import (
    DatabaseCreator,
    DatabaseInitializer,
    Extractor,
    HealthProbe,
    HealthProbeError,
    ProcessController,
    RemoteFetcher,
)

__all__ = [
    # Inbound ports
    "LifecyclePort",
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
    # Outbound ports
    "DatabaseCreator",
    "DatabaseInitializer",
    "Extractor",
    "HealthProbe",
    "HealthProbeError",
    "ProcessController",
    "RemoteFetcher",
]
