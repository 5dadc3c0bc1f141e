"""Temp-file backed buffer for child process output.

initdb and postgres write straight into a file descriptor owned by this
buffer. At well-defined checkpoints (after a successful start, after a
failed bootstrap, on stop) the bytes written since the previous checkpoint
are copied to the caller's log sink.
"""

from __future__ import annotations

import codecs
import os
import tempfile
import threading
from pathlib import Path
from typing import BinaryIO, TextIO


class BufferedLog:
    """Append-only log file with incremental flushing to a text sink.

    Attributes:
        path: Location of the backing temp file.
    """

    def __init__(
        self,
        sink: TextIO | None,
        directory: str | Path | None = None,
        encoding: str = "utf-8",
    ) -> None:
        """Create the backing temp file.

        Args:
            sink: Destination for flushed output. None discards it.
            directory: Directory for the temp file (system default if None).
            encoding: Encoding used to decode child output for the sink.
        """
        self._sink = sink
        # A checkpoint may split a multi-byte character; the tail waits for the next flush.
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._offset = 0
        self._lock = threading.Lock()
        fd, name = tempfile.mkstemp(prefix="embedded_postgres_log", dir=directory)
        self._file: BinaryIO | None = os.fdopen(fd, "ab")
        self.path = Path(name)

    @property
    def file(self) -> BinaryIO:
        """Writable handle suitable for subprocess stdout/stderr."""
        if self._file is None:
            raise ValueError("Log buffer is closed")
        return self._file

    def write(self, data: bytes) -> None:
        """Append bytes to the buffer."""
        self.file.write(data)
        self.file.flush()

    def flush(self) -> int:
        """Copy everything written since the last flush to the sink.

        Returns:
            Number of bytes copied.
        """
        with self._lock:
            if self._file is None:
                return 0
            self._file.flush()
            if self._sink is None:
                return 0

            with open(self.path, "rb") as reader:
                reader.seek(self._offset)
                data = reader.read()

            if data:
                self._offset += len(data)
                text = self._decoder.decode(data)
                if text:
                    self._sink.write(text)
                    self._sink.flush()
            return len(data)

    def close(self) -> None:
        """Close and delete the backing file."""
        with self._lock:
            if self._file is None:
                return
            self._file.close()
            self._file = None
            tail = self._decoder.decode(b"", final=True)
            if tail and self._sink is not None:
                self._sink.write(tail)
                self._sink.flush()
            self.path.unlink(missing_ok=True)
