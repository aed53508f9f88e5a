"""
Process supervision — start, stop and query the active server.

State machine::

    STOPPED ──start()──▶ STARTING ──ready──▶ RUNNING
       ▲                                        │
       └────────── STOPPING ◀──stop()───────────┘

Nothing here is remembered between invocations: whether the server is
running is always answered by scanning the process table.
"""

from __future__ import annotations

import logging
import os
import signal
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from evm.adapters.http import HttpClient
from evm.adapters.process import ProcessLocator
from evm.adapters.shell import CommandRunner
from evm.core.config.loader import EvmSettings
from evm.core.errors import (
    InvalidOptionError,
    NetworkError,
    NoActiveVersionError,
    NotRunningError,
    ServerRunningError,
    SignalFailedError,
    StartupFailedError,
    StartupTimeoutError,
)
from evm.core.models.version import major_of
from evm.core.services.registry import VersionRegistry

logger = logging.getLogger(__name__)

# Readiness GETs must not eat into the one-second polling cadence.
_READINESS_TIMEOUT = 1.0


class ServerState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass
class ServerStatus:
    state: ServerState
    pid: int | None = None
    version: str | None = None

    @property
    def running(self) -> bool:
        return self.state == ServerState.RUNNING

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "running": self.running,
            "pid": self.pid,
            "version": self.version,
        }


def option_key(option: str) -> str:
    """The setting name of a ``key=value`` option."""
    return option.split("=", 1)[0].strip()


def validate_options(options: Sequence[str]) -> list[str]:
    """Check every start option is ``key=value`` with a non-empty key."""
    for opt in options:
        if "=" not in opt or not option_key(opt):
            raise InvalidOptionError(f"Invalid option '{opt}' (expected key=value)")
    return list(options)


class ProcessSupervisor:
    def __init__(
        self,
        settings: EvmSettings,
        registry: VersionRegistry,
        locator: ProcessLocator,
        http: HttpClient,
        runner: CommandRunner,
        *,
        sleep: Callable[[float], None] = time.sleep,
        kill: Callable[[int, int], None] = os.kill,
    ):
        self.settings = settings
        self.registry = registry
        self.locator = locator
        self.http = http
        self.runner = runner
        self._sleep = sleep
        self._kill = kill
        self.state = ServerState.STOPPED

    # ── Command construction ────────────────────────────────────

    def build_command(self, version: str, options: Sequence[str]) -> list[str]:
        """Launch command for the active installation.

        For major versions above 7 the security subsystem is switched
        off unless the caller set that key explicitly.
        """
        binary = self.registry.active_home() / "bin" / self.settings.product
        cmd = [str(binary), "-p", str(self.settings.pid_file)]
        for opt in options:
            cmd += ["-E", opt]

        security = self.settings.security_setting
        if major_of(version) > 7 and not any(option_key(o) == security for o in options):
            cmd += ["-E", f"{security}=false"]
        return cmd

    # ── Start ───────────────────────────────────────────────────

    def start(self, options: Sequence[str] = ()) -> ServerStatus:
        """Launch the active version and wait until it answers.

        Raises:
            InvalidOptionError: An option is not ``key=value``.
            ServerRunningError: A server is already running.
            NoActiveVersionError: No version is active.
            StartupFailedError: The process died before becoming ready.
            StartupTimeoutError: Readiness was never observed.
        """
        options = validate_options(options)

        pid = self.locator.find_running_server_pid()
        if pid is not None:
            raise ServerRunningError(pid)

        version = self.registry.current_version()
        if version is None:
            raise NoActiveVersionError()

        cmd = self.build_command(version, options)
        self.state = ServerState.STARTING
        logger.info("Starting Elasticsearch %s", version)
        proc = self.runner.spawn(cmd, cwd=self.registry.active_home())

        for attempt in range(self.settings.readiness_attempts):
            located = self.locator.find_running_server_pid()
            if located is None and proc.poll() is not None:
                self.state = ServerState.STOPPED
                raise StartupFailedError(
                    f"Elasticsearch {version} exited during startup "
                    f"(exit code {proc.returncode}). Check that a compatible Java "
                    "runtime is installed and see the server logs."
                )

            if self._is_ready(version):
                self.state = ServerState.RUNNING
                logger.info("Elasticsearch %s is ready after %d checks", version, attempt + 1)
                return ServerStatus(ServerState.RUNNING, pid=located or proc.pid, version=version)

            self._sleep(self.settings.poll_interval)

        message = (
            f"Elasticsearch {version} did not become ready after "
            f"{self.settings.readiness_attempts} checks of {self.settings.readiness_url}"
        )
        # The process is not killed; it may still finish starting.
        leftover = self.locator.find_running_server_pid()
        if leftover is None and proc.poll() is None:
            leftover = proc.pid
        if leftover is not None:
            self.state = ServerState.STARTING
            message += f". It is still running (pid {leftover}); run 'evm stop' to shut it down."
        else:
            self.state = ServerState.STOPPED
        raise StartupTimeoutError(message)

    def _is_ready(self, version: str) -> bool:
        try:
            body = self.http.get_text(self.settings.readiness_url, timeout=_READINESS_TIMEOUT)
        except NetworkError:
            return False
        return version in body

    # ── Stop ────────────────────────────────────────────────────

    def stop(self) -> int:
        """Terminate the running server and wait until it is gone.

        Returns:
            The PID that was stopped.

        Raises:
            NotRunningError: No server process was found.
            SignalFailedError: SIGTERM could not be delivered.
        """
        pid = self.locator.find_running_server_pid()
        if pid is None:
            raise NotRunningError()

        self.state = ServerState.STOPPING
        logger.info("Stopping Elasticsearch (pid %d)", pid)
        try:
            self._kill(pid, signal.SIGTERM)
        except OSError as e:
            self.state = ServerState.RUNNING
            raise SignalFailedError(f"Cannot signal process {pid}: {e}") from e

        while self.locator.find_running_server_pid() is not None:
            self._sleep(self.settings.poll_interval)

        self.state = ServerState.STOPPED
        logger.info("Elasticsearch (pid %d) stopped", pid)
        return pid

    # ── Status ──────────────────────────────────────────────────

    def status(self) -> ServerStatus:
        pid = self.locator.find_running_server_pid()
        state = ServerState.RUNNING if pid is not None else ServerState.STOPPED
        return ServerStatus(state, pid=pid, version=self.registry.current_version())
