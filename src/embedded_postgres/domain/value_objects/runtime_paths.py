"""Filesystem layout of one embedded Postgres run."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CACHE_DIR = Path.home() / ".embedded-postgres"


@dataclass(frozen=True, slots=True)
class RuntimePaths:
    """Paths resolved once at the beginning of a start sequence.

    Attributes:
        cache_location: Archive path of the cache entry.
        runtime_path: Scratch directory, wiped on every start.
        data_path: PostgreSQL data directory.
        binaries_path: Directory whose ``bin/`` holds the executables.
    """

    cache_location: Path
    runtime_path: Path
    data_path: Path
    binaries_path: Path

    @classmethod
    def derive(
        cls,
        cache_location: Path,
        runtime_path: Path | None = None,
        data_path: Path | None = None,
        binaries_path: Path | None = None,
    ) -> RuntimePaths:
        """Fill unset paths with defaults next to the cache entry.

        runtime defaults to ``<cache dir>/extracted``, data to
        ``<runtime>/data`` and binaries to the runtime directory itself.
        """
        runtime = runtime_path or cache_location.parent / "extracted"
        return cls(
            cache_location=cache_location,
            runtime_path=runtime,
            data_path=data_path or runtime / "data",
            binaries_path=binaries_path or runtime,
        )

    @property
    def bin_dir(self) -> Path:
        return self.binaries_path / "bin"

    def executable(self, name: str) -> Path:
        return executable_path(self.binaries_path, name)


def executable_path(binaries_path: Path, name: str) -> Path:
    """Path of a PostgreSQL executable such as ``pg_ctl`` under ``binaries_path/bin``."""
    path = Path(binaries_path) / "bin" / name
    if os.name == "nt":
        path = path.with_suffix(".exe")
    return path
