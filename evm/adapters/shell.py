"""
Shell adapter — run delegated binaries and launch the server.

The single place where evm spawns subprocesses.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs external commands on behalf of the core services."""

    def run(self, cmd: list[str], cwd: Path | None = None) -> int:
        """Run ``cmd`` in the foreground, output passed straight through.

        Returns:
            The process exit code.
        """
        logger.debug("Executing: %s (cwd=%s)", " ".join(cmd), cwd)
        result = subprocess.run(cmd, cwd=cwd)
        logger.debug("Exit code %d from %s", result.returncode, cmd[0])
        return result.returncode

    def spawn(self, cmd: list[str], cwd: Path | None = None) -> subprocess.Popen:
        """Launch ``cmd`` detached from this invocation's session.

        The child outlives the evm process that started it.
        """
        logger.debug("Spawning: %s (cwd=%s)", " ".join(cmd), cwd)
        return subprocess.Popen(
            cmd,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
