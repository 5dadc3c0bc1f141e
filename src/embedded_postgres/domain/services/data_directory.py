"""Data directory reuse decisions.

initdb writes the server's major version into ``PG_VERSION`` at the root of
every data directory. A directory can be reused by a later run only if that
marker is compatible with the version about to be started.
"""

from __future__ import annotations

from pathlib import Path

VERSION_MARKER = "PG_VERSION"


def read_version_marker(data_dir: Path) -> str | None:
    """Return the stripped ``PG_VERSION`` content, or None if unreadable."""
    try:
        return (Path(data_dir) / VERSION_MARKER).read_text().strip()
    except (OSError, UnicodeDecodeError):
        return None


def versions_compatible(marker: str, version: str) -> bool:
    """Dot-segment prefix match in either direction.

    "16" is compatible with "16.6.0" and "15.2" with "15", but "1" is not
    compatible with "15.0" and "14.9" is not compatible with "15".
    """
    marker_parts = marker.split(".")
    version_parts = version.split(".")
    shorter = min(len(marker_parts), len(version_parts))
    return marker_parts[:shorter] == version_parts[:shorter]


def is_reusable(data_dir: Path, version: str) -> bool:
    """Decide whether an existing data directory can be started as-is.

    Never raises: a missing, unreadable or empty marker means the directory
    has to be recreated.

    Args:
        data_dir: PostgreSQL data directory.
        version: Configured PostgreSQL version.

    Returns:
        True if the directory's marker matches the configured version.
    """
    marker = read_version_marker(data_dir)
    if not marker:
        return False
    return versions_compatible(marker, version)
