"""Parser for ``pg_ctl status`` output."""

from __future__ import annotations

import re

from embedded_postgres.domain.entities.process import PostgresStatus

# First line of a running server's status, e.g.
#   pg_ctl: server is running (PID: 12345)
_RUNNING = re.compile(r"^pg_ctl: server is running \(PID: (\d+)\)")


def parse_status(output: str) -> PostgresStatus:
    """Interpret free-form status output.

    Only the first line is inspected. Anything that does not match the
    running pattern is reported as not running rather than raising.
    """
    lines = output.splitlines()
    if lines:
        match = _RUNNING.match(lines[0].strip())
        if match:
            return PostgresStatus(running=True, pid=int(match.group(1)), output=output)
    return PostgresStatus(running=False, output=output)
