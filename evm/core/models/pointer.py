"""
ActiveVersionPointer — the symlink that marks one installation as active.

The link lives at ``<root>/<product>`` and targets a sibling
``<product>-<version>`` directory.  Repointing builds the new link under
a temporary name and renames it over the old one, so the pointer is
never missing in between (on filesystems where rename is atomic).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from evm.core.errors import FilesystemError

logger = logging.getLogger(__name__)


class ActiveVersionPointer:
    def __init__(self, path: Path):
        self.path = path

    def exists(self) -> bool:
        return self.path.is_symlink()

    def target(self) -> Path | None:
        """The directory the link points at, or None if there is no link."""
        if not self.path.is_symlink():
            return None
        raw = Path(os.readlink(self.path))
        if not raw.is_absolute():
            raw = self.path.parent / raw
        return raw

    def current_name(self) -> str | None:
        """Name of the target directory, or None if absent or dangling."""
        target = self.target()
        if target is None or not target.is_dir():
            return None
        return target.name

    def is_dangling(self) -> bool:
        target = self.target()
        return target is not None and not target.is_dir()

    def repoint(self, target: Path) -> None:
        """Atomically replace the link so it points at ``target``.

        Raises:
            FilesystemError: The link could not be created or replaced,
                e.g. because a real directory sits at the link path.
        """
        tmp = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            if tmp.is_symlink() or tmp.exists():
                tmp.unlink()
            # Relative target keeps the root relocatable.
            tmp.symlink_to(target.name if target.parent == self.path.parent else target)
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise FilesystemError(f"Cannot update active version link {self.path}: {e}") from e
        logger.debug("Pointer %s -> %s", self.path, target)

    def __repr__(self) -> str:
        return f"<ActiveVersionPointer {self.path} -> {self.target()}>"
