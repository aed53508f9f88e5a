"""
Process adapter — find the running server in the OS process table.

evm never trusts a PID file for its own decisions: every invocation
re-scans the process table, so a server started by an earlier
invocation (or left behind by a crash) is always seen as it really is.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import psutil

logger = logging.getLogger(__name__)


class ProcessLocator(ABC):
    """Discovers the live server process, if any."""

    @abstractmethod
    def find_running_server_pid(self) -> int | None:
        """Return the PID of a running server, or None.

        If several processes match, any one of them may be returned.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class PsutilProcessLocator(ProcessLocator):
    """Matches processes whose command line contains ``marker``."""

    def __init__(self, marker: str):
        self.marker = marker

    def find_running_server_pid(self) -> int | None:
        for proc in psutil.process_iter(["pid", "cmdline"]):
            try:
                cmdline = proc.info.get("cmdline") or []
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
            if any(self.marker in arg for arg in cmdline):
                logger.debug("Found server process %d", proc.info["pid"])
                return proc.info["pid"]
        return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} marker={self.marker!r}>"
