"""Domain services.

Pure decisions over on-disk state and command output; no process or
network access happens here.
"""

from embedded_postgres.domain.services.data_directory import (
    VERSION_MARKER,
    is_reusable,
    read_version_marker,
    versions_compatible,
)
from embedded_postgres.domain.services.status_parser import parse_status

__all__ = [
    "VERSION_MARKER",
    "is_reusable",
    "parse_status",
    "read_version_marker",
    "versions_compatible",
]
