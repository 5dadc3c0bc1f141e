"""Readiness gate: turns "process exists" into "process accepts work"."""

from __future__ import annotations

from typing import Callable

from embedded_postgres.domain.value_objects import Deadline
from embedded_postgres.infrastructure.logging import get_logger
from embedded_postgres.infrastructure.metrics import MetricsRegistry
from embedded_postgres.infrastructure.polling import PollTimeoutError, poll_until
from embedded_postgres.ports.inbound import SpawnError, StartupTimeoutError
from embedded_postgres.ports.outbound import HealthProbe, HealthProbeError


class ReadinessGate:
    """Polls a health probe until it succeeds or the start deadline passes."""

    def __init__(
        self,
        probe: HealthProbe,
        host: str,
        port: int,
        username: str,
        password: str,
        database: str,
        interval_seconds: float = 0.1,
        is_alive: Callable[[], bool] | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the gate.

        Args:
            probe: Single-attempt health check.
            host: Server host.
            port: Server port.
            username: Role to connect as.
            password: Role password.
            database: Database to connect to.
            interval_seconds: Pause between probes.
            is_alive: Reports whether the server process still exists; when
                it returns False the gate fails without waiting for the deadline.
            metrics: Optional metrics registry.
        """
        self._probe = probe
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._database = database
        self._interval = interval_seconds
        self._is_alive = is_alive
        self._metrics = metrics
        self._logger = get_logger(__name__, port=port)

    def _attempt(self, deadline: Deadline) -> None:
        if self._is_alive is not None and not self._is_alive():
            raise SpawnError(
                f"postgres on port {self._port} exited before accepting connections"
            )
        self._probe.probe(
            self._host,
            self._port,
            self._username,
            self._password,
            self._database,
            timeout_seconds=deadline.remaining(),
        )

    def _on_retry(self, error: BaseException) -> None:
        if self._metrics is not None:
            self._metrics.readiness_probes_total.labels(result="not_ready").inc()
        self._logger.debug("readiness_probe_failed", error=str(error))

    def wait_until_ready(self, deadline: Deadline) -> None:
        """Block until the server answers.

        Raises:
            StartupTimeoutError: If the deadline passes first.
            SpawnError: If the server process exits while waiting.
        """
        try:
            poll_until(
                deadline,
                lambda: self._attempt(deadline),
                retry_on=(HealthProbeError,),
                interval=self._interval,
                on_retry=self._on_retry,
            )
        except PollTimeoutError as e:
            raise StartupTimeoutError(
                f"timed out waiting for database to become available on port {self._port} "
                f"after {e.attempts} attempts: {e.last_error}"
            ) from e

        if self._metrics is not None:
            self._metrics.readiness_probes_total.labels(result="ready").inc()
