"""Application layer - lifecycle orchestration."""

from embedded_postgres.application.embedded_postgres import (
    EmbeddedPostgres,
    ProcessFactory,
    default_process_factory,
)
from embedded_postgres.application.readiness import ReadinessGate

__all__ = [
    "EmbeddedPostgres",
    "ProcessFactory",
    "default_process_factory",
    "ReadinessGate",
]
