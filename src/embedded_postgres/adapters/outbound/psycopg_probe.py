"""SQL-level collaborators built on psycopg2.

- PsycopgHealthProbe: one connection attempt plus ``SELECT 1``
- PsycopgDatabaseCreator: ``CREATE DATABASE`` on a freshly initialized cluster
"""

from __future__ import annotations

import math

import psycopg2
from psycopg2 import sql

from embedded_postgres.domain.value_objects import Deadline
from embedded_postgres.infrastructure.logging import get_logger
from embedded_postgres.infrastructure.polling import PollTimeoutError, poll_until
from embedded_postgres.ports.inbound import DatabaseCreationError
from embedded_postgres.ports.outbound import HealthProbeError

MAINTENANCE_DATABASE = "postgres"


def capped_connect_timeout(limit: int, remaining_seconds: float | None) -> int:
    """Whole-second connect_timeout that does not outlast the remaining budget.

    libpq only accepts whole seconds and treats 0 as "wait forever", so the
    result is at least 1.
    """
    if remaining_seconds is None:
        return limit
    return max(1, min(limit, math.ceil(remaining_seconds)))


class PsycopgHealthProbe:
    """HealthProbe that opens a real connection and runs ``SELECT 1``."""

    def __init__(self, connect_timeout_seconds: int = 2) -> None:
        self._connect_timeout = connect_timeout_seconds

    def probe(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        database: str,
        timeout_seconds: float | None = None,
    ) -> None:
        """Attempt one connection, bounded by ``timeout_seconds`` when given.

        Raises:
            HealthProbeError: If connecting or querying fails.
        """
        try:
            conn = psycopg2.connect(
                host=host,
                port=port,
                user=username,
                password=password,
                dbname=database,
                connect_timeout=capped_connect_timeout(self._connect_timeout, timeout_seconds),
            )
        except psycopg2.Error as e:
            raise HealthProbeError(str(e).strip()) from e

        try:
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        except psycopg2.Error as e:
            raise HealthProbeError(str(e).strip()) from e
        finally:
            conn.close()


class PsycopgDatabaseCreator:
    """DatabaseCreator that issues ``CREATE DATABASE`` over the maintenance database.

    The server may still be starting when this runs, so connection failures
    are retried until the start deadline.
    """

    def __init__(
        self,
        host: str = "localhost",
        interval_seconds: float = 0.1,
        connect_timeout_seconds: int = 2,
    ) -> None:
        self._host = host
        self._interval = interval_seconds
        self._connect_timeout = connect_timeout_seconds
        self._logger = get_logger(__name__)

    def create_database(
        self,
        deadline: Deadline,
        port: int,
        username: str,
        password: str,
        database: str,
    ) -> None:
        """Create ``database`` unless it is the maintenance database.

        Raises:
            DatabaseCreationError: If no connection could be made before the
                deadline or the statement fails.
        """
        if database == MAINTENANCE_DATABASE:
            return

        def connect():
            return psycopg2.connect(
                host=self._host,
                port=port,
                user=username,
                password=password,
                dbname=MAINTENANCE_DATABASE,
                connect_timeout=capped_connect_timeout(
                    self._connect_timeout, deadline.remaining()
                ),
            )

        try:
            conn = poll_until(
                deadline,
                connect,
                retry_on=(psycopg2.OperationalError,),
                interval=self._interval,
            )
        except PollTimeoutError as e:
            raise DatabaseCreationError(
                f"unable to connect to create database with custom name {database} "
                f"with the following error: {e.last_error}"
            ) from e

        try:
            conn.autocommit = True
            with conn.cursor() as cursor:
                cursor.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(database)))
        except psycopg2.Error as e:
            raise DatabaseCreationError(
                f"unable to create database {database}: {str(e).strip()}"
            ) from e
        finally:
            conn.close()

        self._logger.info("database_created", database=database, port=port)
