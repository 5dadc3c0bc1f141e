"""Unit tests for the psycopg2-backed probe and database creator."""

from __future__ import annotations

from typing import Any

import psycopg2
import pytest

from embedded_postgres.adapters.outbound import PsycopgDatabaseCreator, PsycopgHealthProbe
from embedded_postgres.adapters.outbound import psycopg_probe
from embedded_postgres.adapters.outbound.psycopg_probe import capped_connect_timeout
from embedded_postgres.domain.value_objects import Deadline
from embedded_postgres.ports.inbound import DatabaseCreationError
from embedded_postgres.ports.outbound import HealthProbeError


class FakeCursor:
    def __init__(self, connection: FakeConnection) -> None:
        self._connection = connection

    def __enter__(self) -> FakeCursor:
        return self

    def __exit__(self, *exc: object) -> None:
        pass

    def execute(self, statement: Any) -> None:
        if self._connection.execute_error is not None:
            raise self._connection.execute_error
        self._connection.statements.append(statement)

    def fetchone(self) -> tuple[int]:
        return (1,)


class FakeConnection:
    def __init__(self, execute_error: Exception | None = None) -> None:
        self.execute_error = execute_error
        self.statements: list[Any] = []
        self.autocommit = False
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True


class FakeConnect:
    """Replacement for psycopg2.connect that fails a number of times first."""

    def __init__(self, failures: int = 0, connection: FakeConnection | None = None) -> None:
        self.failures = failures
        self.connection = connection or FakeConnection()
        self.calls: list[dict[str, Any]] = []

    def __call__(self, **kwargs: Any) -> FakeConnection:
        self.calls.append(kwargs)
        if len(self.calls) <= self.failures:
            raise psycopg2.OperationalError("could not connect to server: Connection refused")
        return self.connection


@pytest.mark.unit
class TestPsycopgHealthProbe:
    """Tests for the health probe."""

    def test_probe_success(self, monkeypatch: pytest.MonkeyPatch) -> None:
        connect = FakeConnect()
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", connect)

        PsycopgHealthProbe().probe("localhost", 5432, "postgres", "secret", "app")

        assert connect.calls[0]["dbname"] == "app"
        assert connect.calls[0]["password"] == "secret"
        assert connect.connection.statements == ["SELECT 1"]
        assert connect.connection.closed

    def test_probe_timeout_is_capped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        connect = FakeConnect()
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", connect)

        PsycopgHealthProbe(connect_timeout_seconds=10).probe(
            "localhost", 5432, "postgres", "secret", "app", timeout_seconds=2.5
        )

        assert connect.calls[0]["connect_timeout"] == 3

    def test_probe_connection_refused(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", FakeConnect(failures=1))

        with pytest.raises(HealthProbeError, match="Connection refused"):
            PsycopgHealthProbe().probe("localhost", 5432, "postgres", "secret", "app")

    def test_probe_query_failure_closes_connection(self, monkeypatch: pytest.MonkeyPatch) -> None:
        connection = FakeConnection(execute_error=psycopg2.DatabaseError("the system is starting up"))
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", FakeConnect(connection=connection))

        with pytest.raises(HealthProbeError):
            PsycopgHealthProbe().probe("localhost", 5432, "postgres", "secret", "app")

        assert connection.closed


@pytest.mark.unit
class TestPsycopgDatabaseCreator:
    """Tests for CREATE DATABASE."""

    def test_maintenance_database_is_skipped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        connect = FakeConnect()
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", connect)

        PsycopgDatabaseCreator().create_database(
            Deadline.after(5.0), 5432, "postgres", "postgres", "postgres"
        )

        assert connect.calls == []

    def test_creates_database_after_retries(self, monkeypatch: pytest.MonkeyPatch) -> None:
        connect = FakeConnect(failures=2)
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", connect)

        PsycopgDatabaseCreator(interval_seconds=0.01).create_database(
            Deadline.after(5.0), 5432, "postgres", "postgres", "app"
        )

        assert len(connect.calls) == 3
        assert all(call["dbname"] == "postgres" for call in connect.calls)
        assert connect.connection.autocommit is True
        assert len(connect.connection.statements) == 1
        assert connect.connection.closed

    def test_connection_deadline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", FakeConnect(failures=10_000))

        with pytest.raises(DatabaseCreationError, match="unable to connect to create database"):
            PsycopgDatabaseCreator(interval_seconds=0.01).create_database(
                Deadline.after(0.05), 5432, "postgres", "postgres", "app"
            )

    def test_connect_timeout_within_deadline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        connect = FakeConnect()
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", connect)

        PsycopgDatabaseCreator(connect_timeout_seconds=30).create_database(
            Deadline.after(4.0), 5432, "postgres", "postgres", "app"
        )

        assert 1 <= connect.calls[0]["connect_timeout"] <= 4

    def test_statement_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        connection = FakeConnection(
            execute_error=psycopg2.ProgrammingError('database "app" already exists')
        )
        monkeypatch.setattr(psycopg_probe.psycopg2, "connect", FakeConnect(connection=connection))

        with pytest.raises(DatabaseCreationError, match="already exists"):
            PsycopgDatabaseCreator().create_database(
                Deadline.after(5.0), 5432, "postgres", "postgres", "app"
            )

        assert connection.closed


@pytest.mark.unit
@pytest.mark.parametrize(
    ("limit", "remaining", "expected"),
    [
        (2, None, 2),
        (10, 2.5, 3),
        (2, 30.0, 2),
        (5, 0.0, 1),
    ],
)
def test_capped_connect_timeout(limit: int, remaining: float | None, expected: int) -> None:
    assert capped_connect_timeout(limit, remaining) == expected
