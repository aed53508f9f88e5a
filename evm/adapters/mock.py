"""
Mock adapters — in-memory doubles for the network, process table and shell.

Used by the test suite (and usable for dry experiments) so that core
services can be exercised without touching mirrors, real processes
or delegated binaries.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from evm.adapters.http import HttpClient
from evm.adapters.process import ProcessLocator
from evm.adapters.shell import CommandRunner
from evm.core.errors import NetworkError


class MockHttpClient(HttpClient):
    """Serves a fixed set of URLs from memory.

    ``resources`` maps URL → body.  A list body is consumed one item
    per ``get_text`` call (the last item sticks); a ``None`` item
    behaves like an unreachable endpoint.
    """

    def __init__(self, resources: dict[str, bytes | str | list] | None = None):
        self.resources: dict[str, bytes | str | list] = dict(resources or {})
        self.failing_downloads: set[str] = set()
        self.call_log: list[tuple[str, str]] = []

    def add(self, url: str, body: bytes | str | list) -> None:
        self.resources[url] = body

    def fail_download(self, url: str) -> None:
        """Make the probe for ``url`` succeed but its transfer fail."""
        self.failing_downloads.add(url)

    def calls(self, method: str) -> list[str]:
        return [url for m, url in self.call_log if m == method]

    def exists(self, url: str, timeout: float) -> bool:
        self.call_log.append(("HEAD", url))
        return url in self.resources

    def get_text(self, url: str, timeout: float) -> str:
        self.call_log.append(("GET", url))
        body = self._next_body(url)
        if body is None:
            raise NetworkError(f"Failed to fetch {url}: connection refused")
        return body.decode("utf-8") if isinstance(body, bytes) else body

    def download(self, url: str, dest: Path, timeout: float) -> Path:
        self.call_log.append(("DOWNLOAD", url))
        if url in self.failing_downloads:
            raise NetworkError(f"Download of {url} failed: connection reset")
        body = self._next_body(url)
        if body is None:
            raise NetworkError(f"Download of {url} failed: not found")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(body if isinstance(body, bytes) else body.encode("utf-8"))
        return dest

    def _next_body(self, url: str) -> bytes | str | None:
        body = self.resources.get(url)
        if isinstance(body, list):
            if not body:
                return None
            return body.pop(0) if len(body) > 1 else body[0]
        return body


class MockProcessLocator(ProcessLocator):
    """Reports a configurable PID.

    ``set_sequence`` queues answers for successive scans; the last one
    sticks once the queue runs dry.
    """

    def __init__(self, pid: int | None = None):
        self.pid = pid
        self._sequence: list[int | None] = []
        self.call_count = 0

    def set_sequence(self, pids: list[int | None]) -> None:
        self._sequence = list(pids)

    def find_running_server_pid(self) -> int | None:
        self.call_count += 1
        if self._sequence:
            self.pid = self._sequence.pop(0)
        return self.pid


class MockProcess:
    """Stand-in for ``subprocess.Popen`` returned by ``spawn``."""

    def __init__(self, returncode: int | None = None, pid: int = 4242):
        self.returncode = returncode
        self.pid = pid

    def poll(self) -> int | None:
        return self.returncode


class MockCommandRunner(CommandRunner):
    """Records commands instead of running them."""

    def __init__(self, returncode: int = 0):
        self.returncode = returncode
        self.commands: list[list[str]] = []
        self.spawned: list[list[str]] = []
        self.process = MockProcess()
        self.on_spawn: Callable[[list[str]], None] | None = None

    def run(self, cmd: list[str], cwd: Path | None = None) -> int:
        self.commands.append(list(cmd))
        return self.returncode

    def spawn(self, cmd: list[str], cwd: Path | None = None) -> MockProcess:
        self.spawned.append(list(cmd))
        if self.on_spawn is not None:
            self.on_spawn(cmd)
        return self.process
