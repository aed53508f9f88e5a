"""
Version strings — syntax and ordering (pure).

A version is just a string such as ``8.9.0`` or ``6.0.0-beta1``.
These helpers validate it and derive what the rest of the tool
needs: the major number, and a sort key.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from evm.core.errors import InvalidVersionError

VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)(?:-([A-Za-z0-9]+))?")


class VersionParts(NamedTuple):
    major: int
    minor: int
    patch: int
    prerelease: str | None


def is_valid_version(version: str) -> bool:
    """Whether ``version`` matches MAJOR.MINOR.PATCH[-prerelease]."""
    return bool(VERSION_PATTERN.fullmatch(version or ""))


def validate_version(version: str) -> str:
    """Return ``version`` unchanged, or raise InvalidVersionError."""
    if not is_valid_version(version):
        raise InvalidVersionError(version)
    return version


def parse_version(version: str) -> VersionParts:
    """Split a version string into its numeric parts and prerelease tag.

    Raises:
        InvalidVersionError: If the string is not a well-formed version.
    """
    m = VERSION_PATTERN.fullmatch(version or "")
    if not m:
        raise InvalidVersionError(version)
    major, minor, patch, pre = m.groups()
    return VersionParts(int(major), int(minor), int(patch), pre)


def major_of(version: str) -> int:
    return parse_version(version).major


def sort_key(version: str) -> tuple:
    """Ordering key: numeric parts, then releases above their prereleases."""
    parts = parse_version(version)
    return (
        parts.major,
        parts.minor,
        parts.patch,
        parts.prerelease is None,
        parts.prerelease or "",
    )
