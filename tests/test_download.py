"""
Tests for mirror selection, transfer and checksum verification.
"""

import hashlib

import pytest

from evm.core.errors import (
    ArtifactNotFoundError,
    ChecksumMismatchError,
    IntegrityError,
    InvalidVersionError,
    NetworkError,
)
from evm.core.services.download import Downloader, hash_algorithm_for, verify_checksum

VERSION = "8.9.0"
NAME = "elasticsearch-8.9.0-linux-x86_64.tar.gz"
M1 = f"https://m1.example/es/{NAME}"
M2 = f"https://m2.example/es/8.9.0/{NAME}"
PAYLOAD = b"pretend this is a tarball"


@pytest.fixture
def downloader(settings, http):
    return Downloader(settings, http, system="Linux", machine="x86_64")


class TestMirrorSelection:
    def test_first_mirror_wins(self, downloader, http, settings):
        http.add(M1, PAYLOAD)
        http.add(M2, b"other")
        path = downloader.download(VERSION)
        assert path == settings.home / NAME
        assert path.read_bytes() == PAYLOAD
        assert http.calls("DOWNLOAD") == [M1]

    def test_falls_through_to_second_mirror(self, downloader, http):
        http.add(M2, PAYLOAD)
        path = downloader.download(VERSION)
        assert path.read_bytes() == PAYLOAD
        assert http.calls("HEAD")[:2] == [M1, M2]

    def test_not_found_anywhere(self, downloader, http, settings):
        with pytest.raises(ArtifactNotFoundError):
            downloader.download(VERSION)
        assert not (settings.home / NAME).exists()

    def test_not_found_is_network_error(self, downloader):
        with pytest.raises(NetworkError):
            downloader.download(VERSION)

    def test_transfer_failure_does_not_fall_back(self, downloader, http):
        http.add(M1, PAYLOAD)
        http.add(M2, PAYLOAD)
        http.fail_download(M1)
        with pytest.raises(NetworkError):
            downloader.download(VERSION)
        assert http.calls("DOWNLOAD") == [M1]

    def test_malformed_version_touches_nothing(self, downloader, http):
        with pytest.raises(InvalidVersionError):
            downloader.download("8.9")
        assert http.call_log == []


class TestChecksum:
    def test_sha512_match(self, downloader, http):
        http.add(M1, PAYLOAD)
        digest = hashlib.sha512(PAYLOAD).hexdigest()
        http.add(f"{M1}.sha512", f"{digest}  {NAME}\n")
        assert downloader.download(VERSION).is_file()

    def test_sha1_fallback(self, downloader, http):
        http.add(M1, PAYLOAD)
        http.add(f"{M1}.sha1", hashlib.sha1(PAYLOAD).hexdigest())
        assert downloader.download(VERSION).is_file()

    def test_sha1_txt_fallback(self, downloader, http):
        http.add(M1, PAYLOAD)
        http.add(f"{M1}.sha1.txt", hashlib.sha1(PAYLOAD).hexdigest() + "\n")
        assert downloader.download(VERSION).is_file()

    def test_sha512_preferred_over_sha1(self, downloader, http):
        http.add(M1, PAYLOAD)
        http.add(f"{M1}.sha512", hashlib.sha512(PAYLOAD).hexdigest())
        http.add(f"{M1}.sha1", "0" * 40)
        assert downloader.download(VERSION).is_file()
        assert f"{M1}.sha1" not in http.calls("GET")

    def test_mismatch_removes_artifact(self, downloader, http, settings):
        http.add(M1, PAYLOAD)
        http.add(f"{M1}.sha512", "deadbeef" * 16)
        with pytest.raises(ChecksumMismatchError):
            downloader.download(VERSION)
        assert not (settings.home / NAME).exists()

    def test_mismatch_is_integrity_error(self, downloader, http):
        http.add(M1, PAYLOAD)
        http.add(f"{M1}.sha1", "0" * 40)
        with pytest.raises(IntegrityError):
            downloader.download(VERSION)

    def test_missing_checksum_is_accepted(self, downloader, http):
        http.add(M1, PAYLOAD)
        assert downloader.download(VERSION).read_bytes() == PAYLOAD


class TestChecksumHelpers:
    def test_algorithm_by_extension(self):
        assert hash_algorithm_for("sha512") == "sha512"
        assert hash_algorithm_for("sha1") == "sha1"
        assert hash_algorithm_for("sha1.txt") == "sha1"

    def test_verify_ignores_filename_and_case(self, tmp_path):
        f = tmp_path / "a.bin"
        f.write_bytes(b"abc")
        digest = hashlib.sha1(b"abc").hexdigest().upper()
        assert verify_checksum(f, f"{digest} *a.bin", "sha1")

    def test_verify_empty_checksum_fails(self, tmp_path):
        f = tmp_path / "a.bin"
        f.write_bytes(b"abc")
        assert not verify_checksum(f, "   ", "sha1")
