"""
Download and checksum verification.

The first mirror that answers the existence probe is the one used;
if its transfer then fails, the whole download fails.  A checksum
file is looked up next to the artifact and verified when present.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from evm.adapters.http import HttpClient
from evm.core.config.loader import EvmSettings
from evm.core.errors import ArtifactNotFoundError, ChecksumMismatchError
from evm.core.models.version import validate_version
from evm.core.services.artifact import artifact_urls, resolve_artifact_name

logger = logging.getLogger(__name__)


def hash_algorithm_for(extension: str) -> str:
    """``sha512`` files use SHA-512; everything else is shasum's default SHA-1."""
    return "sha512" if extension == "sha512" else "sha1"


def file_digest(path: Path, algorithm: str) -> str:
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_checksum(path: Path, checksum_text: str, algorithm: str) -> bool:
    """Compare ``path``'s digest with a checksum file's contents.

    Checksum files hold the hex digest, optionally followed by the
    file name (``<hex>  elasticsearch-8.9.0-linux-x86_64.tar.gz``).
    """
    tokens = checksum_text.split()
    if not tokens:
        return False
    expected = tokens[0].strip().lower()
    return file_digest(path, algorithm) == expected


class Downloader:
    """Fetches release artifacts into the installation root."""

    def __init__(
        self,
        settings: EvmSettings,
        http: HttpClient,
        *,
        system: str | None = None,
        machine: str | None = None,
    ):
        self.settings = settings
        self.http = http
        self.system = system
        self.machine = machine

    def artifact_path(self, version: str) -> Path:
        name = resolve_artifact_name(
            version, system=self.system, machine=self.machine,
            product=self.settings.product,
        )
        return self.settings.home / name

    def find_artifact_url(self, version: str) -> str:
        """Return the URL on the first mirror that answers, in mirror order.

        Raises:
            ArtifactNotFoundError: If no mirror serves the artifact.
        """
        urls = artifact_urls(
            version,
            self.settings.mirrors,
            system=self.system,
            machine=self.machine,
            product=self.settings.product,
        )
        for url in urls:
            if self.http.exists(url, timeout=self.settings.probe_timeout):
                return url
            logger.debug("Not available: %s", url)
        raise ArtifactNotFoundError(
            f"Elasticsearch {version} was not found on any mirror"
        )

    def download(self, version: str) -> Path:
        """Download and verify the artifact for ``version``.

        Returns:
            Path of the verified artifact inside the installation root.

        Raises:
            ArtifactNotFoundError: No mirror serves the artifact.
            NetworkError: The transfer or checksum fetch failed.
            ChecksumMismatchError: The artifact does not match its checksum.
        """
        validate_version(version)
        url = self.find_artifact_url(version)
        dest = self.artifact_path(version)

        logger.info("Downloading %s", url)
        self.http.download(url, dest, timeout=self.settings.transfer_timeout)
        self._verify(url, dest)
        return dest

    def _verify(self, url: str, dest: Path) -> None:
        for ext in self.settings.checksum_extensions:
            checksum_url = f"{url}.{ext}"
            if not self.http.exists(checksum_url, timeout=self.settings.probe_timeout):
                continue

            algorithm = hash_algorithm_for(ext)
            try:
                text = self.http.get_text(checksum_url, timeout=self.settings.probe_timeout)
            except Exception:
                dest.unlink(missing_ok=True)
                raise

            if not verify_checksum(dest, text, algorithm):
                dest.unlink(missing_ok=True)
                raise ChecksumMismatchError(dest.name, algorithm)
            logger.info("Checksum OK (%s) for %s", algorithm, dest.name)
            return

        # Older releases were published without checksum files.
        logger.info("No checksum published for %s — skipping verification", dest.name)
