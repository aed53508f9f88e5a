"""
Version registry — what is installed, and which one is active.

Always derived from the filesystem on each call; nothing is cached.
"""

from __future__ import annotations

import logging
from pathlib import Path

from evm.core.config.loader import EvmSettings
from evm.core.models.pointer import ActiveVersionPointer
from evm.core.models.version import is_valid_version, sort_key

logger = logging.getLogger(__name__)


class VersionRegistry:
    def __init__(self, settings: EvmSettings):
        self.settings = settings
        self.pointer = ActiveVersionPointer(settings.pointer_path)

    def version_directory(self, version: str) -> Path:
        """Install directory for ``version`` (existence not implied)."""
        return self.settings.version_dir(version)

    def is_installed(self, version: str) -> bool:
        path = self.version_directory(version)
        return path.is_dir() and not path.is_symlink()

    def list_installed(self) -> list[str]:
        """Installed versions, newest first."""
        home = self.settings.home
        if not home.is_dir():
            return []

        prefix = self.settings.dir_prefix
        versions = []
        for entry in home.iterdir():
            if not entry.name.startswith(prefix) or entry.is_symlink() or not entry.is_dir():
                continue
            version = entry.name[len(prefix):]
            if is_valid_version(version):
                versions.append(version)
        return sorted(versions, key=sort_key, reverse=True)

    def current_version(self) -> str | None:
        """The active version, or None if nothing (valid) is active."""
        name = self.pointer.current_name()
        if name is None:
            if self.pointer.is_dangling():
                logger.warning(
                    "Active version link %s points to a missing directory (%s)",
                    self.pointer.path, self.pointer.target(),
                )
            return None

        prefix = self.settings.dir_prefix
        if not name.startswith(prefix):
            logger.warning("Active version link targets unexpected directory %s", name)
            return None
        return name[len(prefix):]

    def pointer_is_dangling(self) -> bool:
        return self.pointer.is_dangling()

    def active_home(self) -> Path:
        """Path through the pointer, as used to launch binaries."""
        return self.pointer.path
