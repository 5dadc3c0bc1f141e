"""Server process state and status."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ProcessState(Enum):
    """Lifecycle of the postgres child process.

    NOT_RUNNING -> STARTING -> RUNNING -> STOPPING -> NOT_RUNNING
    """

    NOT_RUNNING = auto()
    STARTING = auto()
    RUNNING = auto()
    STOPPING = auto()


@dataclass(frozen=True)
class PostgresStatus:
    """Result of ``pg_ctl status`` against a data directory.

    Attributes:
        running: True only if the output said the server is running.
        pid: Server PID when running.
        output: Raw command output, kept for diagnostics.
    """

    running: bool
    pid: int | None = None
    output: str = ""
