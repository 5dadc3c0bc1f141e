"""PostgreSQL versions and binary artifact targets.

Binaries are published as Maven artifacts named
``embedded-postgres-binaries-<os>-<arch>``. This module maps the running
interpreter's platform onto those names.
"""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class PostgresVersion(str, Enum):
    """Known-good PostgreSQL releases. Any other version string is also accepted."""

    V17 = "17.2.0"
    V16 = "16.6.0"
    V15 = "15.10.0"
    V14 = "14.15.0"
    V13 = "13.18.0"
    V12 = "12.22.0"


_OPERATING_SYSTEMS = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
}

_ARCHITECTURES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64v8",
    "arm64": "arm64v8",
    "armv7l": "arm32v7",
    "armv6l": "arm32v6",
    "i386": "i386",
    "i686": "i386",
    "x86": "i386",
    "ppc64le": "ppc64le",
}

# First major version with native Apple Silicon builds.
_DARWIN_ARM64_MIN_MAJOR = 14

_OS_RELEASE = Path("/etc/os-release")


@dataclass(frozen=True, slots=True)
class BinaryTarget:
    """A (version, operating system, architecture) triple keying one cache entry.

    Attributes:
        version: PostgreSQL version, e.g. "16.6.0".
        operating_system: Artifact OS name, e.g. "linux".
        architecture: Artifact architecture, e.g. "amd64" or "arm64v8-alpine".
    """

    version: str
    operating_system: str
    architecture: str

    @property
    def artifact_id(self) -> str:
        return f"embedded-postgres-binaries-{self.operating_system}-{self.architecture}"

    @property
    def archive_name(self) -> str:
        return f"{self.artifact_id}-{self.version}.txz"


def major_version(version: str) -> int | None:
    """Return the leading numeric component of a version string."""
    head = version.split(".", 1)[0]
    return int(head) if head.isdigit() else None


def is_alpine_linux(os_release: Path = _OS_RELEASE) -> bool:
    """Detect musl-based Alpine Linux from /etc/os-release."""
    try:
        return "alpine" in os_release.read_text().lower()
    except OSError:
        return False


def resolve_target(
    version: str,
    operating_system: str | None = None,
    architecture: str | None = None,
    *,
    sys_platform: str = sys.platform,
    machine: str | None = None,
    alpine: bool | None = None,
) -> BinaryTarget:
    """Resolve the artifact target for a version on the current platform.

    Explicit ``operating_system``/``architecture`` values win over detection.

    Args:
        version: PostgreSQL version string.
        operating_system: Override for the artifact OS name.
        architecture: Override for the artifact architecture name.
        sys_platform: Value of ``sys.platform`` to map (injectable for tests).
        machine: Value of ``platform.machine()`` to map.
        alpine: Whether the host is Alpine Linux (detected when None).

    Returns:
        The resolved target.

    Raises:
        ValueError: If the platform has no published binaries.
    """
    if operating_system is None:
        operating_system = _OPERATING_SYSTEMS.get(sys_platform)
        if operating_system is None:
            raise ValueError(f"No PostgreSQL binaries for platform {sys_platform!r}")

    if architecture is None:
        raw_machine = (machine if machine is not None else platform.machine()).lower()
        architecture = _ARCHITECTURES.get(raw_machine)
        if architecture is None:
            raise ValueError(f"No PostgreSQL binaries for architecture {raw_machine!r}")

        if operating_system == "darwin" and architecture == "arm64v8":
            major = major_version(version)
            if major is not None and major < _DARWIN_ARM64_MIN_MAJOR:
                architecture = "amd64"  # runs under Rosetta

        if operating_system == "linux":
            if alpine is None:
                alpine = is_alpine_linux()
            if alpine:
                architecture = f"{architecture}-alpine"

    return BinaryTarget(
        version=version,
        operating_system=operating_system,
        architecture=architecture,
    )
