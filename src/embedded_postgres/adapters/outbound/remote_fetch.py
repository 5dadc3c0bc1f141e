"""Download PostgreSQL binaries from a Maven repository.

Binaries are published as jars under ``io.zonky.test.postgres``. Each jar
wraps a single ``.txz`` archive, which is what ends up in the cache.

URL layout:
    <repo>/io/zonky/test/postgres/<artifact>/<version>/<artifact>-<version>.jar
    <repo>/io/zonky/test/postgres/<artifact>/<version>/<artifact>-<version>.jar.sha256
"""

from __future__ import annotations

import hashlib
import io
import os
import tempfile
import zipfile
from pathlib import Path

import httpx

from embedded_postgres.domain.value_objects import BinaryTarget
from embedded_postgres.infrastructure.config import DEFAULT_REPOSITORY_URL
from embedded_postgres.infrastructure.logging import get_logger

GROUP_PATH = "io/zonky/test/postgres"


class RemoteFetchError(Exception):
    """Raised when the binary archive cannot be downloaded or unpacked."""

    pass


class MavenRemoteFetcher:
    """RemoteFetcher implementation backed by httpx.

    Attributes:
        repository_url: Base URL of the Maven repository.
    """

    def __init__(
        self,
        repository_url: str = DEFAULT_REPOSITORY_URL,
        timeout_seconds: float = 120.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            repository_url: Base URL of the Maven repository.
            timeout_seconds: Per-request timeout.
            client: Preconfigured client (tests pass one with a mock transport).
        """
        self.repository_url = repository_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._client = client
        self._logger = get_logger(__name__)

    def jar_url(self, target: BinaryTarget) -> str:
        """URL of the jar holding ``target``'s archive."""
        artifact = target.artifact_id
        return (
            f"{self.repository_url}/{GROUP_PATH}/{artifact}/{target.version}/"
            f"{artifact}-{target.version}.jar"
        )

    def fetch(self, target: BinaryTarget, cache_location: Path) -> Path:
        """Download, verify and cache the archive for ``target``.

        Raises:
            RemoteFetchError: On HTTP errors, checksum mismatch or a jar
                without a ``.txz`` member.
        """
        url = self.jar_url(target)
        self._logger.info("binary_download_started", url=url)

        if self._client is not None:
            jar = self._download(self._client, url, target)
        else:
            with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
                jar = self._download(client, url, target)

        archive = self._extract_archive(jar, url)
        self._write_atomically(archive, Path(cache_location))

        self._logger.info(
            "binary_download_finished",
            url=url,
            cache_location=str(cache_location),
            size_bytes=len(archive),
        )
        return Path(cache_location)

    def _download(self, client: httpx.Client, url: str, target: BinaryTarget) -> bytes:
        try:
            response = client.get(url)
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"unable to download {url}: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise RemoteFetchError(f"no version found matching {target.version} at {url}")
        if response.is_error:
            raise RemoteFetchError(f"unable to download {url}: HTTP {response.status_code}")

        jar = response.content
        self._verify_checksum(client, url, jar)
        return jar

    def _verify_checksum(self, client: httpx.Client, url: str, jar: bytes) -> None:
        checksum_url = f"{url}.sha256"
        try:
            response = client.get(checksum_url)
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"unable to download {checksum_url}: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            self._logger.warning("binary_checksum_missing", url=checksum_url)
            return
        if response.is_error:
            raise RemoteFetchError(
                f"unable to download {checksum_url}: HTTP {response.status_code}"
            )

        # "<hex digest>" or "<hex digest>  <file name>"
        fields = response.text.split()
        expected = fields[0].lower() if fields else ""
        actual = hashlib.sha256(jar).hexdigest()
        if expected != actual:
            raise RemoteFetchError(
                f"downloaded checksums do not match for {url}: expected {expected}, got {actual}"
            )

    @staticmethod
    def _extract_archive(jar: bytes, url: str) -> bytes:
        try:
            with zipfile.ZipFile(io.BytesIO(jar)) as zf:
                for name in zf.namelist():
                    if name.endswith(".txz"):
                        return zf.read(name)
        except zipfile.BadZipFile as e:
            raise RemoteFetchError(f"unable to read jar from {url}: {e}") from e
        raise RemoteFetchError(f"no .txz archive found in {url}")

    @staticmethod
    def _write_atomically(data: bytes, cache_location: Path) -> None:
        cache_location.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{cache_location.name}.", suffix=".part", dir=cache_location.parent
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, cache_location)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
