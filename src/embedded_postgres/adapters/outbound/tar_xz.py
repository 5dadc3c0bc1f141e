"""tar.xz extraction for PostgreSQL binary archives.

Archives are unpacked into a staging directory next to the destination and
then moved into place, ``bin`` last. A concurrent or later reader that sees
``<destination>/bin`` can therefore rely on the rest of the tree being there.
"""

from __future__ import annotations

import shutil
import tarfile
import tempfile
from pathlib import Path

BIN_DIR = "bin"


class TarXzExtractor:
    """Extractor for ``.txz`` archives using the tarfile ``data`` filter.

    The filter rejects absolute paths, ``..`` components and links that point
    outside the destination, and strips setuid/setgid bits.
    """

    def extract(self, archive: Path, destination: Path) -> None:
        """Unpack ``archive`` into ``destination``.

        Args:
            archive: Path to the ``.txz`` file.
            destination: Directory to populate (created if missing).

        Raises:
            tarfile.TarError: If the archive is corrupt or unsafe.
            OSError: If the filesystem operation fails.
        """
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)

        staging = Path(tempfile.mkdtemp(prefix=".extract-", dir=destination.parent))
        try:
            with tarfile.open(archive, mode="r:xz") as tar:
                tar.extractall(staging, filter="data")

            entries = sorted(staging.iterdir(), key=lambda p: p.name == BIN_DIR)
            for entry in entries:
                target = destination / entry.name
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                elif target.exists() or target.is_symlink():
                    target.unlink()
                entry.rename(target)
        finally:
            shutil.rmtree(staging, ignore_errors=True)
