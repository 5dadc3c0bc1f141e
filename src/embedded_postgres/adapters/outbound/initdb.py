"""Data directory bootstrap via ``initdb``."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import BinaryIO

from embedded_postgres.domain.value_objects import executable_path
from embedded_postgres.ports.inbound import InitializationError

PASSWORD_FILE = "pwfile"


class InitDbInitializer:
    """DatabaseInitializer that runs the bundled ``initdb`` executable.

    The superuser password is handed over through a temporary password
    file in the runtime directory so it never shows up in the process list.
    """

    def init(
        self,
        binaries_path: Path,
        runtime_path: Path,
        data_path: Path,
        username: str,
        password: str,
        locale: str | None,
        encoding: str | None,
        log_file: BinaryIO,
    ) -> None:
        """Create a new cluster in ``data_path``.

        Args:
            binaries_path: Directory containing ``bin/initdb``.
            runtime_path: Scratch directory for the password file.
            data_path: Cluster directory to create (must not exist).
            username: Superuser name.
            password: Superuser password.
            locale: Optional ``--locale``.
            encoding: Optional ``--encoding``.
            log_file: Receives combined stdout/stderr.

        Raises:
            InitializationError: If the password file cannot be written or
                initdb cannot be launched or exits non-zero.
        """
        password_file = Path(runtime_path) / PASSWORD_FILE
        try:
            password_file.write_text(password)
        except OSError as e:
            raise InitializationError(
                f"unable to write password file to {password_file}: {e}"
            ) from e

        args = [
            str(executable_path(binaries_path, "initdb")),
            "-A", "password",
            "-U", username,
            "-D", str(data_path),
            f"--pwfile={password_file}",
        ]
        if locale:
            args.append(f"--locale={locale}")
        if encoding:
            args.append(f"--encoding={encoding}")

        command = " ".join(args)
        try:
            result = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as e:
            raise InitializationError(f"unable to init database using '{command}': {e}") from e
        finally:
            password_file.unlink(missing_ok=True)

        if result.returncode != 0:
            raise InitializationError(
                f"unable to init database using '{command}': exit status {result.returncode}"
            )
