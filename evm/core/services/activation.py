"""
Activation — switch which installed version is active.

Checks run in a fixed order and each one aborts on its own:
version syntax, no live server, not already active, installed.
The last one is informational: the caller gets the installed list
back instead of an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from evm.adapters.process import ProcessLocator
from evm.core.errors import ServerRunningError, VersionAlreadyActiveError
from evm.core.models.version import validate_version
from evm.core.services.registry import VersionRegistry

logger = logging.getLogger(__name__)


@dataclass
class ActivationResult:
    version: str
    activated: bool = False
    previous: str | None = None
    installed: list[str] = field(default_factory=list)


class ActivationController:
    def __init__(self, registry: VersionRegistry, locator: ProcessLocator):
        self.registry = registry
        self.locator = locator

    def activate(self, version: str) -> ActivationResult:
        """Make ``version`` the active installation.

        Raises:
            InvalidVersionError: Malformed version string.
            ServerRunningError: A server process is live.
            VersionAlreadyActiveError: ``version`` is already active.
        """
        validate_version(version)

        pid = self.locator.find_running_server_pid()
        if pid is not None:
            raise ServerRunningError(pid)

        current = self.registry.current_version()
        if current == version:
            raise VersionAlreadyActiveError(version)

        if not self.registry.is_installed(version):
            logger.info("Elasticsearch %s is not installed; nothing to activate", version)
            return ActivationResult(
                version=version,
                previous=current,
                installed=self.registry.list_installed(),
            )

        self.registry.pointer.repoint(self.registry.version_directory(version))
        logger.info("Active version: %s (was %s)", version, current or "none")
        return ActivationResult(version=version, activated=True, previous=current)
