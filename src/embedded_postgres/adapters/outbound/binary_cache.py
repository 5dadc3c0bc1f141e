"""Binary cache with process-wide single-flight acquisition.

Downloaded archives live in a cache directory keyed by version, OS and
architecture; extracted binaries live in a per-run binaries directory. The
check-then-fetch-then-extract sequence is serialized per cache entry so
that concurrent starts in one process never download the same archive
twice or read a half-extracted tree.

Cross-process safety is not provided: two host processes sharing a cache
directory rely only on the atomic rename of downloaded archives.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from embedded_postgres.adapters.outbound.remote_fetch import MavenRemoteFetcher
from embedded_postgres.adapters.outbound.tar_xz import BIN_DIR, TarXzExtractor
from embedded_postgres.domain.value_objects import DEFAULT_CACHE_DIR, BinaryTarget
from embedded_postgres.infrastructure.logging import get_logger
from embedded_postgres.infrastructure.tracing import trace_span
from embedded_postgres.ports.inbound import AcquisitionError
from embedded_postgres.ports.outbound import Extractor, RemoteFetcher


class AcquisitionSource(Enum):
    """Which path an acquisition took."""

    ALREADY_EXTRACTED = "already_extracted"
    EXTRACTED_FROM_CACHE = "extracted_from_cache"
    DOWNLOADED = "downloaded"


class KeyedLock:
    """One mutex per key, created on first use.

    Thread Safety:
        Lock creation is guarded by an internal mutex; the per-key locks
        are never discarded, so two holders of a key always share one lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        with self._lock_for(key):
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Shared by every BinaryCache that is not given its own lock.
_ACQUISITION_LOCKS = KeyedLock()


def default_acquisition_locks() -> KeyedLock:
    """Return the process-wide acquisition lock."""
    return _ACQUISITION_LOCKS


class CacheLocator:
    """Maps a binary target to its archive path in the cache directory."""

    def __init__(self, cache_dir: Path | None = None) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir is not None else DEFAULT_CACHE_DIR

    def locate(self, target: BinaryTarget) -> Path:
        return self.cache_dir / target.archive_name

    def exists(self, target: BinaryTarget) -> bool:
        return self.locate(target).is_file()


class BinaryCache:
    """Acquires extracted PostgreSQL binaries for a target.

    Example:
        >>> cache = BinaryCache(CacheLocator(Path("/tmp/cache")))
        >>> cache.acquire(target, Path("/tmp/run"))
        <AcquisitionSource.DOWNLOADED: 'downloaded'>
    """

    def __init__(
        self,
        locator: CacheLocator,
        fetcher: RemoteFetcher | None = None,
        extractor: Extractor | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            locator: Resolves cache entries.
            fetcher: Downloads missing archives (Maven Central by default).
            extractor: Unpacks archives (tar.xz by default).
            locks: Acquisition lock; the process-wide one by default.
        """
        self.locator = locator
        self._fetcher = fetcher or MavenRemoteFetcher()
        self._extractor = extractor or TarXzExtractor()
        self._locks = locks or default_acquisition_locks()
        self._logger = get_logger(__name__)

    def acquire(self, target: BinaryTarget, binaries_path: Path) -> AcquisitionSource:
        """Make sure ``binaries_path/bin`` holds the binaries for ``target``.

        Args:
            target: Version, OS and architecture.
            binaries_path: Extraction directory.

        Returns:
            Which path was taken.

        Raises:
            AcquisitionError: If downloading or extracting fails.
        """
        binaries_path = Path(binaries_path)
        cache_location = self.locator.locate(target)

        with self._locks.hold(cache_location):
            if (binaries_path / BIN_DIR).is_dir():
                return AcquisitionSource.ALREADY_EXTRACTED

            source = AcquisitionSource.EXTRACTED_FROM_CACHE
            if not cache_location.is_file():
                with trace_span("binary.fetch", {"artifact": target.archive_name}):
                    try:
                        self._fetcher.fetch(target, cache_location)
                    except Exception as e:
                        raise AcquisitionError(
                            f"unable to fetch {target.archive_name}: {e}"
                        ) from e
                source = AcquisitionSource.DOWNLOADED

            with trace_span("binary.extract", {"destination": str(binaries_path)}):
                try:
                    self._extractor.extract(cache_location, binaries_path)
                except Exception as e:
                    raise AcquisitionError(
                        f"unable to extract {cache_location} to {binaries_path}: {e}"
                    ) from e

            self._logger.info(
                "binary_extracted",
                archive=str(cache_location),
                destination=str(binaries_path),
                source=source.value,
            )
            return source
