"""
Shared test fixtures and configuration.
"""

import io
import tarfile
from pathlib import Path

import pytest

from evm.adapters.mock import MockCommandRunner, MockHttpClient, MockProcessLocator
from evm.core.config.loader import EvmSettings
from evm.core.context import build_context


class FakeKill:
    """Records signals instead of delivering them."""

    def __init__(self, error: OSError | None = None):
        self.error = error
        self.calls: list[tuple[int, int]] = []

    def __call__(self, pid: int, sig: int) -> None:
        self.calls.append((pid, sig))
        if self.error is not None:
            raise self.error


@pytest.fixture
def settings(tmp_path: Path) -> EvmSettings:
    """Settings rooted in a temp directory, with two test mirrors."""
    home = tmp_path / "evm-home"
    home.mkdir()
    return EvmSettings(
        home=home,
        mirrors=["https://m1.example/es", "https://m2.example/es/{version}"],
        poll_interval=0,
        readiness_attempts=5,
    )


@pytest.fixture
def http() -> MockHttpClient:
    return MockHttpClient()


@pytest.fixture
def locator() -> MockProcessLocator:
    return MockProcessLocator()


@pytest.fixture
def runner() -> MockCommandRunner:
    return MockCommandRunner()


@pytest.fixture
def kill() -> FakeKill:
    return FakeKill()


@pytest.fixture
def app(settings, http, locator, runner, kill):
    """An AppContext wired around mock adapters."""
    return build_context(
        settings,
        http=http,
        locator=locator,
        runner=runner,
        sleep=lambda _s: None,
        kill=kill,
    )


def _write_executable(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)


@pytest.fixture
def make_installed(settings):
    """Factory: create an installed version directory with its binaries."""

    def _make(version: str) -> Path:
        root = settings.version_dir(version)
        _write_executable(root / "bin" / "elasticsearch")
        _write_executable(root / "bin" / "plugin")
        _write_executable(root / "bin" / "elasticsearch-plugin")
        return root

    return _make


@pytest.fixture
def activate(app):
    """Point the active-version link at an installed version."""

    def _activate(version: str) -> None:
        app.registry.pointer.repoint(app.settings.version_dir(version))

    return _activate


@pytest.fixture
def make_tarball():
    """Factory: bytes of a minimal release tarball for a version."""
    return _build_tarball


def _build_tarball(version: str, product: str = "elasticsearch") -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in (
            (f"{product}-{version}/bin/{product}", b"#!/bin/sh\nexit 0\n"),
            (f"{product}-{version}/bin/{product}-plugin", b"#!/bin/sh\nexit 0\n"),
            (f"{product}-{version}/README.asciidoc", b"Elasticsearch\n"),
        ):
            info = tarfile.TarInfo(name=name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()
