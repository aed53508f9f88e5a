"""
Install operations — install, remove and locate versions.

Installation unpacks into a hidden temporary directory inside the
root and renames the result into place, so a failed extraction never
leaves a half-populated ``elasticsearch-<version>`` directory behind.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import tempfile
from dataclasses import dataclass
from pathlib import Path

from evm.adapters.process import ProcessLocator
from evm.core.config.loader import ensure_home
from evm.core.errors import (
    ExtractionError,
    FilesystemError,
    NoActiveVersionError,
    ServerRunningError,
    VersionAlreadyInstalledError,
    VersionInUseError,
    VersionNotInstalledError,
)
from evm.core.models.version import validate_version
from evm.core.services.activation import ActivationController
from evm.core.services.download import Downloader
from evm.core.services.registry import VersionRegistry

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    version: str
    path: Path
    activated: bool = False


class Installer:
    def __init__(
        self,
        registry: VersionRegistry,
        downloader: Downloader,
        activation: ActivationController,
        locator: ProcessLocator,
    ):
        self.registry = registry
        self.downloader = downloader
        self.activation = activation
        self.locator = locator

    @property
    def settings(self):
        return self.registry.settings

    # ── Install ─────────────────────────────────────────────────

    def install(self, version: str) -> InstallResult:
        """Download, unpack and (if nothing is active yet) activate ``version``.

        Raises:
            InvalidVersionError: Malformed version string.
            VersionAlreadyInstalledError: The directory already exists.
            NetworkError / IntegrityError: From the downloader.
            ExtractionError: The archive could not be unpacked.
        """
        validate_version(version)
        ensure_home(self.settings)

        if self.registry.is_installed(version):
            raise VersionAlreadyInstalledError(version)

        artifact = self.downloader.download(version)
        try:
            target = self._extract(artifact, version)
        finally:
            try:
                artifact.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove %s: %s", artifact, e)

        result = InstallResult(version=version, path=target)

        if self.registry.current_version() is None:
            pid = self.locator.find_running_server_pid()
            if pid is not None:
                logger.warning(
                    "Not activating %s: a server is running (pid %d)", version, pid
                )
            else:
                result.activated = self.activation.activate(version).activated

        logger.info("Installed Elasticsearch %s at %s", version, target)
        return result

    def _extract(self, artifact: Path, version: str) -> Path:
        target = self.registry.version_directory(version)
        try:
            staging = Path(tempfile.mkdtemp(dir=self.settings.home, prefix=".install-"))
        except OSError as e:
            raise FilesystemError(
                f"Cannot create a staging directory in {self.settings.home}: {e}"
            ) from e
        try:
            try:
                with tarfile.open(artifact, "r:gz") as tar:
                    if hasattr(tarfile, "data_filter"):
                        tar.extractall(staging, filter="data")
                    else:
                        tar.extractall(staging)
            except (tarfile.TarError, OSError) as e:
                raise ExtractionError(f"Cannot extract {artifact.name}: {e}") from e

            entries = list(staging.iterdir())
            if len(entries) == 1 and entries[0].is_dir():
                source = entries[0]
            else:
                source = staging

            try:
                source.rename(target)
            except OSError as e:
                raise ExtractionError(f"Cannot move extracted files to {target}: {e}") from e
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

        return target

    # ── Remove ──────────────────────────────────────────────────

    def remove(self, version: str) -> Path:
        """Delete an installed, inactive version.

        Raises:
            InvalidVersionError: Malformed version string.
            VersionNotInstalledError: Nothing to remove.
            ServerRunningError: A server process is live.
            VersionInUseError: ``version`` is the active version.
            FilesystemError: The directory could not be deleted.
        """
        validate_version(version)

        if not self.registry.is_installed(version):
            raise VersionNotInstalledError(version)

        pid = self.locator.find_running_server_pid()
        if pid is not None:
            raise ServerRunningError(pid)

        if self.registry.current_version() == version:
            raise VersionInUseError(version)

        path = self.registry.version_directory(version)
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemError(f"Cannot remove {path}: {e}") from e
        logger.info("Removed Elasticsearch %s (%s)", version, path)
        return path

    # ── Which ───────────────────────────────────────────────────

    def which(self, version: str | None = None) -> Path:
        """Install path of ``version``, or of the active version."""
        if version is None:
            current = self.registry.current_version()
            if current is None:
                raise NoActiveVersionError()
            return self.registry.version_directory(current)

        validate_version(version)
        if not self.registry.is_installed(version):
            raise VersionNotInstalledError(version)
        return self.registry.version_directory(version)
