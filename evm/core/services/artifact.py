"""
Artifact resolution — version → release file name and mirror URLs (pure).

No I/O.  Host OS and CPU default to the running machine but can be
passed explicitly so results are reproducible for any platform.
"""

from __future__ import annotations

import platform

from evm.core.models.version import parse_version

_ARM64 = ("arm64", "aarch64")

# Machine names reported by platform.machine() → release arch suffix
_ARCH_MAP = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
}


def resolve_arch(version: str, machine: str | None = None) -> str:
    """Release architecture for ``version`` on ``machine``.

    No native ARM build was published up to 7.15, so ARM hosts fall
    back to the x86_64 artifact there.
    """
    m = (machine or platform.machine()).lower()
    if m in _ARM64:
        parts = parse_version(version)
        if parts.major == 7 and parts.minor <= 15:
            return "x86_64"
        return "aarch64"
    return _ARCH_MAP.get(m, m)


def resolve_artifact_name(
    version: str,
    *,
    system: str | None = None,
    machine: str | None = None,
    product: str = "elasticsearch",
) -> str:
    """Release tarball name for ``version``.

    Examples::

        resolve_artifact_name("6.8.0")                   → elasticsearch-6.8.0.tar.gz
        resolve_artifact_name("8.9.0", system="Linux",
                              machine="x86_64")          → elasticsearch-8.9.0-linux-x86_64.tar.gz
    """
    parts = parse_version(version)
    if parts.major < 7:
        return f"{product}-{version}.tar.gz"

    os_name = (system or platform.system()).lower()
    arch = resolve_arch(version, machine)
    return f"{product}-{version}-{os_name}-{arch}.tar.gz"


def artifact_urls(
    version: str,
    mirrors: list[str],
    *,
    system: str | None = None,
    machine: str | None = None,
    product: str = "elasticsearch",
) -> list[str]:
    """Candidate download URLs, one per mirror, in mirror order."""
    name = resolve_artifact_name(version, system=system, machine=machine, product=product)
    urls = []
    for mirror in mirrors:
        base = mirror.replace("{version}", version).rstrip("/")
        urls.append(f"{base}/{name}")
    return urls
