"""Pytest configuration and fixtures for embedded_postgres tests."""

from __future__ import annotations

import io
import socket
import tarfile
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from embedded_postgres.adapters.outbound.binary_cache import BinaryCache, CacheLocator, KeyedLock
from embedded_postgres.domain.value_objects import BinaryTarget, Deadline
from embedded_postgres.infrastructure.config import (
    BinaryConfig,
    Config,
    LifecycleConfig,
    PathsConfig,
    PostgresConfig,
)
from embedded_postgres.infrastructure.metrics import MetricsRegistry
from embedded_postgres.ports.inbound import DatabaseCreationError
from embedded_postgres.ports.outbound import HealthProbeError

# Stand-ins for the PostgreSQL executables. postgres records its pid the way
# the real server does so that pg_ctl can find it.
FAKE_POSTGRES = """#!/bin/sh
DATA=""
while [ $# -gt 0 ]; do
  case "$1" in
    -D) DATA="$2"; shift 2 ;;
    *) shift ;;
  esac
done
echo "$$" > "$DATA/postmaster.pid"
echo "fake postgres: database system is ready to accept connections"
exec sleep 30
"""

FAKE_PG_CTL = """#!/bin/sh
CMD="$1"
shift
DATA=""
while [ $# -gt 0 ]; do
  case "$1" in
    -D) DATA="$2"; shift 2 ;;
    *) shift ;;
  esac
done
PIDFILE="$DATA/postmaster.pid"
case "$CMD" in
  stop)
    if [ ! -f "$PIDFILE" ]; then
      echo "pg_ctl: PID file \\"$PIDFILE\\" does not exist"
      exit 1
    fi
    kill -TERM "$(cat "$PIDFILE")" 2>/dev/null
    rm -f "$PIDFILE"
    echo "server stopped"
    ;;
  status)
    if [ -f "$PIDFILE" ] && kill -0 "$(cat "$PIDFILE")" 2>/dev/null; then
      echo "pg_ctl: server is running (PID: $(cat "$PIDFILE"))"
    else
      echo "pg_ctl: no server running"
      exit 3
    fi
    ;;
esac
"""

FAKE_INITDB = """#!/bin/sh
DATA=""
while [ $# -gt 0 ]; do
  case "$1" in
    -D) DATA="$2"; shift 2 ;;
    *) shift ;;
  esac
done
mkdir -p "$DATA"
echo "16" > "$DATA/PG_VERSION"
echo "fake initdb: success. cluster created in $DATA"
"""

FAILING_INITDB = """#!/bin/sh
echo "initdb: error: invalid locale settings"
exit 1
"""

TEST_VERSION = "16.6.0"


def write_fake_archive(path: Path, initdb: str = FAKE_INITDB) -> Path:
    """Write a .txz archive laid out like the published binaries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    members = {
        "bin/postgres": FAKE_POSTGRES,
        "bin/pg_ctl": FAKE_PG_CTL,
        "bin/initdb": initdb,
        "share/postgresql/README": "fake share directory\n",
    }
    with tarfile.open(path, "w:xz") as tar:
        for name, content in members.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755 if name.startswith("bin/") else 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


class FakeFetcher:
    """RemoteFetcher that writes a fake archive instead of downloading."""

    def __init__(self, initdb: str = FAKE_INITDB, delay: float = 0.0) -> None:
        self.calls: list[BinaryTarget] = []
        self._initdb = initdb
        self._delay = delay
        self._lock = threading.Lock()

    def fetch(self, target: BinaryTarget, cache_location: Path) -> Path:
        with self._lock:
            self.calls.append(target)
        time.sleep(self._delay)
        return write_fake_archive(cache_location, self._initdb)


class FakeHealthProbe:
    """HealthProbe that fails a fixed number of times, or forever."""

    def __init__(self, failures: int = 0, always_fail: bool = False) -> None:
        self.failures = failures
        self.always_fail = always_fail
        self.calls = 0
        self.timeouts: list[float | None] = []

    def probe(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        database: str,
        timeout_seconds: float | None = None,
    ) -> None:
        self.calls += 1
        self.timeouts.append(timeout_seconds)
        if self.always_fail or self.calls <= self.failures:
            raise HealthProbeError("connection refused")


class FakeDatabaseCreator:
    """DatabaseCreator that records requests and optionally fails."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.created: list[str] = []

    def create_database(
        self, deadline: Deadline, port: int, username: str, password: str, database: str
    ) -> None:
        if self.fail:
            raise DatabaseCreationError(f"unable to create database {database}")
        self.created.append(database)


def free_port() -> int:
    """Ask the OS for a currently unused TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("localhost", 0))
        return sock.getsockname()[1]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def target() -> BinaryTarget:
    """Binary target with fixed platform names."""
    return BinaryTarget(version=TEST_VERSION, operating_system="linux", architecture="amd64")


@pytest.fixture
def fake_archive(temp_dir: Path, target: BinaryTarget) -> Path:
    """A fake binaries archive on disk."""
    return write_fake_archive(temp_dir / "archives" / target.archive_name)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with temporary directories and a free port."""
    return Config(
        binary=BinaryConfig(
            version=TEST_VERSION,
            operating_system="linux",
            architecture="amd64",
        ),
        postgres=PostgresConfig(port=free_port(), database="app"),
        paths=PathsConfig(cache_path=temp_dir / "cache"),
        lifecycle=LifecycleConfig(
            start_timeout_seconds=5.0,
            stop_timeout_seconds=5.0,
            probe_interval_seconds=0.01,
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def fetcher_factory() -> Callable[..., FakeFetcher]:
    """Build fetchers with a custom initdb script or download delay."""
    return FakeFetcher


@pytest.fixture
def port_factory() -> Callable[[], int]:
    """Hand out currently unused TCP ports."""
    return free_port


@pytest.fixture
def failing_initdb() -> str:
    """initdb script that reports an error and exits non-zero."""
    return FAILING_INITDB


@pytest.fixture
def probe_factory() -> Callable[..., FakeHealthProbe]:
    return FakeHealthProbe


@pytest.fixture
def creator_factory() -> Callable[..., FakeDatabaseCreator]:
    return FakeDatabaseCreator


@pytest.fixture
def binary_cache_factory(test_config: Config) -> Callable[[FakeFetcher], BinaryCache]:
    """Binary caches with a private lock so tests never contend with each other."""

    def build(fetcher: FakeFetcher) -> BinaryCache:
        return BinaryCache(
            CacheLocator(test_config.paths.cache_path),
            fetcher=fetcher,
            locks=KeyedLock(),
        )

    return build


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
