"""Server process control.

The ``postgres`` executable runs as a direct child of the host process so
its lifetime can be supervised and its output captured. ``pg_ctl`` is used
for the graceful stop and status queries because it understands the data
directory's ``postmaster.pid``.
"""

from __future__ import annotations

import os
import signal
import subprocess
from typing import BinaryIO

from embedded_postgres.domain.entities.process import PostgresStatus, ProcessState
from embedded_postgres.domain.services.status_parser import parse_status
from embedded_postgres.domain.value_objects import Deadline, RuntimePaths
from embedded_postgres.infrastructure.logging import get_logger
from embedded_postgres.ports.inbound import SpawnError, StatusError, StopError


class PostgresProcess:
    """ProcessController for one postgres server child.

    State machine:
        NOT_RUNNING -> STARTING -> RUNNING -> STOPPING -> NOT_RUNNING

    A failed spawn returns to NOT_RUNNING. A failed stop leaves the state at
    RUNNING because the child is still alive.

    Thread Safety:
        Not thread-safe; owned by a single orchestrator.
    """

    def __init__(
        self,
        paths: RuntimePaths,
        port: int,
        log_file: BinaryIO,
        start_parameters: dict[str, str] | None = None,
        stop_timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the controller.

        Args:
            paths: Binaries, data and runtime directories of this run.
            port: Port the server listens on.
            log_file: Receives the server's stdout and stderr.
            start_parameters: Extra settings passed as ``-c key=value``.
            stop_timeout_seconds: How long stop() waits for the child to exit.
        """
        self._paths = paths
        self._port = port
        self._log_file = log_file
        self._start_parameters = dict(start_parameters or {})
        self._stop_timeout = stop_timeout_seconds
        self._process: subprocess.Popen[bytes] | None = None
        self._state = ProcessState.NOT_RUNNING
        self._logger = get_logger(__name__, port=port)

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        """Exit status of the child once it has exited, else None."""
        return self._process.poll() if self._process is not None else None

    def is_alive(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def command(self) -> list[str]:
        """Server command line for this run."""
        args = [
            str(self._paths.executable("postgres")),
            "-D", str(self._paths.data_path),
            "-p", str(self._port),
        ]
        for key, value in self._start_parameters.items():
            args.extend(["-c", f"{key}={value}"])
        return args

    def start(self, deadline: Deadline) -> None:
        """Spawn the server.

        Returns as soon as the OS process exists; it may not accept
        connections yet.

        Raises:
            SpawnError: If a child is already running, the deadline has
                passed, or the executable cannot be launched.
        """
        if self.is_alive():
            raise SpawnError(f"postgres is already running with pid {self.pid}")
        if deadline.expired():
            raise SpawnError("start deadline elapsed before postgres could be spawned")

        args = self.command()
        self._state = ProcessState.STARTING
        try:
            self._process = subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=self._log_file,
                stderr=subprocess.STDOUT,
                cwd=self._paths.runtime_path,
            )
        except OSError as e:
            self._state = ProcessState.NOT_RUNNING
            raise SpawnError(f"could not start postgres using {' '.join(args)}: {e}") from e

        self._state = ProcessState.RUNNING
        self._logger.debug("postgres_spawned", pid=self._process.pid)

    def stop(self) -> None:
        """Shut the server down and wait for the child to exit.

        Sends a fast shutdown through ``pg_ctl stop``; if that fails (for
        instance because the server has not written its pid file yet) the
        child receives the fast-shutdown signal directly.

        Stopping a child that already exited on its own is a no-op.

        Raises:
            StopError: If the child is still alive after the stop timeout.
        """
        process = self._process
        if process is None:
            self._state = ProcessState.NOT_RUNNING
            return

        if process.poll() is not None:
            self._logger.warning(
                "postgres_already_exited", pid=process.pid, returncode=process.returncode
            )
            self._state = ProcessState.NOT_RUNNING
            return

        self._state = ProcessState.STOPPING
        if not self._pg_ctl_stop():
            self._signal_fast_shutdown(process)

        try:
            process.wait(timeout=self._stop_timeout)
        except subprocess.TimeoutExpired as e:
            self._state = ProcessState.RUNNING
            raise StopError(
                f"postgres (pid {process.pid}) did not exit within {self._stop_timeout}s"
            ) from e

        self._state = ProcessState.NOT_RUNNING
        self._logger.debug("postgres_exited", pid=process.pid, returncode=process.returncode)

    def status(self) -> PostgresStatus:
        """Run ``pg_ctl status`` against the data directory.

        A non-zero exit status is a normal "not running" answer.

        Raises:
            StatusError: If pg_ctl cannot be launched.
        """
        args = [
            str(self._paths.executable("pg_ctl")),
            "status",
            "-D", str(self._paths.data_path),
        ]
        try:
            result = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as e:
            raise StatusError(f"{' '.join(args)} - {e}") from e

        return parse_status(result.stdout.decode(errors="replace"))

    def _pg_ctl_stop(self) -> bool:
        args = [
            str(self._paths.executable("pg_ctl")),
            "stop",
            "-w",
            "-m", "fast",
            "-D", str(self._paths.data_path),
        ]
        try:
            result = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=self._log_file,
                stderr=subprocess.STDOUT,
                timeout=self._stop_timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            self._logger.warning("pg_ctl_stop_failed", error=str(e))
            return False

        if result.returncode != 0:
            self._logger.warning("pg_ctl_stop_failed", returncode=result.returncode)
            return False
        return True

    def _signal_fast_shutdown(self, process: subprocess.Popen[bytes]) -> None:
        # SIGINT is postgres' "fast" shutdown mode.
        try:
            if os.name == "nt":
                process.terminate()
            else:
                process.send_signal(signal.SIGINT)
        except ProcessLookupError:
            pass
