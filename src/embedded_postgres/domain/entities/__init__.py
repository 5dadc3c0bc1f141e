"""Domain entities for embedded Postgres."""

from embedded_postgres.domain.entities.process import PostgresStatus, ProcessState

__all__ = [
    "PostgresStatus",
    "ProcessState",
]
