"""
Tests for install / remove / which.
"""

import hashlib

import pytest

from evm.core.errors import (
    ChecksumMismatchError,
    ExtractionError,
    FilesystemError,
    InvalidVersionError,
    NoActiveVersionError,
    ServerRunningError,
    StateError,
    VersionAlreadyInstalledError,
    VersionInUseError,
    VersionNotInstalledError,
)
from evm.core.services.artifact import artifact_urls


def _serve(http, settings, version, payload, checksum=None):
    url = artifact_urls(version, settings.mirrors)[0]
    http.add(url, payload)
    if checksum is not None:
        http.add(f"{url}.sha512", checksum)
    return url


class TestInstall:
    def test_first_install_becomes_active(self, app, http, settings, make_tarball):
        payload = make_tarball("8.9.0")
        _serve(http, settings, "8.9.0", payload, hashlib.sha512(payload).hexdigest())

        result = app.installer.install("8.9.0")

        assert result.activated
        assert result.path == settings.home / "elasticsearch-8.9.0"
        assert (result.path / "bin" / "elasticsearch").is_file()
        assert app.registry.current_version() == "8.9.0"

    def test_second_install_does_not_switch(self, app, http, settings, make_tarball,
                                            make_installed, activate):
        make_installed("7.17.0")
        activate("7.17.0")
        _serve(http, settings, "8.9.0", make_tarball("8.9.0"))

        result = app.installer.install("8.9.0")

        assert not result.activated
        assert app.registry.current_version() == "7.17.0"
        assert app.registry.list_installed() == ["8.9.0", "7.17.0"]

    def test_artifact_and_staging_cleaned_up(self, app, http, settings, make_tarball):
        _serve(http, settings, "6.8.0", make_tarball("6.8.0"))
        app.installer.install("6.8.0")
        leftovers = sorted(p.name for p in settings.home.iterdir())
        assert leftovers == ["elasticsearch", "elasticsearch-6.8.0"]

    def test_already_installed(self, app, http, make_installed):
        make_installed("8.9.0")
        with pytest.raises(VersionAlreadyInstalledError):
            app.installer.install("8.9.0")
        assert http.call_log == []

    @pytest.mark.parametrize("version", ["8.9.0.0", "8.9.0\n"])
    def test_malformed_version_no_io(self, app, http, settings, version):
        with pytest.raises(InvalidVersionError):
            app.installer.install(version)
        assert http.call_log == []
        assert list(settings.home.iterdir()) == []

    def test_checksum_failure_installs_nothing(self, app, http, settings, make_tarball):
        _serve(http, settings, "8.9.0", make_tarball("8.9.0"), "0" * 128)
        with pytest.raises(ChecksumMismatchError):
            app.installer.install("8.9.0")
        assert app.registry.list_installed() == []
        assert app.registry.current_version() is None
        assert list(settings.home.iterdir()) == []

    def test_corrupt_archive_leaves_no_partial_directory(self, app, http, settings):
        _serve(http, settings, "8.9.0", b"not a gzip stream")
        with pytest.raises(ExtractionError):
            app.installer.install("8.9.0")
        assert list(settings.home.iterdir()) == []

    def test_running_server_skips_auto_activation(self, app, http, settings, make_tarball,
                                                  locator):
        _serve(http, settings, "8.9.0", make_tarball("8.9.0"))
        locator.pid = 77
        result = app.installer.install("8.9.0")
        assert not result.activated
        assert app.registry.is_installed("8.9.0")

    def test_creates_missing_root(self, app, http, settings, make_tarball):
        settings.home.rmdir()
        _serve(http, settings, "8.9.0", make_tarball("8.9.0"))
        app.installer.install("8.9.0")
        assert settings.home.is_dir()


class TestRemove:
    def test_remove_inactive(self, app, make_installed, activate):
        make_installed("7.17.0")
        path = make_installed("8.9.0")
        activate("7.17.0")
        app.installer.remove("8.9.0")
        assert not path.exists()
        assert app.registry.list_installed() == ["7.17.0"]

    def test_remove_active_is_refused(self, app, make_installed, activate):
        path = make_installed("8.9.0")
        activate("8.9.0")
        with pytest.raises(VersionInUseError):
            app.installer.remove("8.9.0")
        assert (path / "bin" / "elasticsearch").is_file()

    def test_remove_active_is_state_error(self, app, make_installed, activate):
        make_installed("8.9.0")
        activate("8.9.0")
        with pytest.raises(StateError):
            app.installer.remove("8.9.0")

    def test_remove_blocked_by_running_server(self, app, make_installed, activate, locator):
        make_installed("7.17.0")
        path = make_installed("8.9.0")
        activate("7.17.0")
        locator.pid = 5
        with pytest.raises(ServerRunningError):
            app.installer.remove("8.9.0")
        assert path.exists()

    def test_remove_not_installed(self, app):
        with pytest.raises(VersionNotInstalledError):
            app.installer.remove("1.2.3")

    def test_remove_malformed(self, app):
        with pytest.raises(InvalidVersionError):
            app.installer.remove("../etc")

    def test_remove_failure_is_reported(self, app, make_installed, monkeypatch):
        from evm.core.services import install_ops

        make_installed("8.9.0")

        def deny(path):
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr(install_ops.shutil, "rmtree", deny)
        with pytest.raises(FilesystemError, match="Cannot remove"):
            app.installer.remove("8.9.0")


class TestWhich:
    def test_active_by_default(self, app, make_installed, activate, settings):
        make_installed("8.9.0")
        activate("8.9.0")
        assert app.installer.which() == settings.home / "elasticsearch-8.9.0"

    def test_explicit_version(self, app, make_installed, settings):
        make_installed("7.17.0")
        assert app.installer.which("7.17.0") == settings.home / "elasticsearch-7.17.0"

    def test_no_active(self, app):
        with pytest.raises(NoActiveVersionError):
            app.installer.which()

    def test_not_installed(self, app):
        with pytest.raises(VersionNotInstalledError):
            app.installer.which("9.9.9")
