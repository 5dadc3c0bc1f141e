"""Value objects for embedded Postgres.

Immutable values that describe what to run and by when:
- PostgresVersion / BinaryTarget: which binaries to acquire
- Deadline: the time budget of a start sequence
- RuntimePaths: the directories one run works in
"""

from embedded_postgres.domain.value_objects.deadline import Deadline
from embedded_postgres.domain.value_objects.platform import (
    BinaryTarget,
    PostgresVersion,
    is_alpine_linux,
    major_version,
    resolve_target,
)
from embedded_postgres.domain.value_objects.runtime_paths import (
    DEFAULT_CACHE_DIR,
    RuntimePaths,
    executable_path,
)

__all__ = [
    "BinaryTarget",
    "Deadline",
    "DEFAULT_CACHE_DIR",
    "PostgresVersion",
    "RuntimePaths",
    "executable_path",
    "is_alpine_linux",
    "major_version",
    "resolve_target",
]
