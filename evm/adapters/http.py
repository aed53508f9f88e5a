"""
HTTP adapter — existence probes, small text fetches, artifact transfers.

Thin layer over ``urllib.request``.  Probes never raise: an unreachable
or non-2xx URL simply does not exist.  Fetches and transfers raise
``NetworkError`` so the caller can abort the invocation.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from pathlib import Path

from evm import __version__
from evm.core.errors import NetworkError

logger = logging.getLogger(__name__)

USER_AGENT = f"evm/{__version__}"
_CHUNK = 64 * 1024


def fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


class HttpClient:
    """The real network transport used by the downloader and supervisor."""

    def exists(self, url: str, timeout: float) -> bool:
        """HEAD ``url``; True if it answers with a 2xx status."""
        req = urllib.request.Request(
            url, method="HEAD", headers={"User-Agent": USER_AGENT}
        )
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                status = resp.getcode()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.debug("Probe %s failed: %s", url, exc)
            return False
        logger.debug("Probe %s -> %s", url, status)
        return 200 <= status < 300

    def get_text(self, url: str, timeout: float) -> str:
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                return resp.read().decode("utf-8", errors="replace")
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise NetworkError(f"Failed to fetch {url}: {exc}") from exc

    def download(self, url: str, dest: Path, timeout: float) -> Path:
        """Stream ``url`` into ``dest``, logging progress every 5%.

        A partially written file is removed before the error propagates.
        """
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp, open(dest, "wb") as f:
                total = int(resp.headers.get("Content-Length", 0) or 0)
                downloaded = 0
                last_progress = -5
                while True:
                    chunk = resp.read(_CHUNK)
                    if not chunk:
                        break
                    f.write(chunk)
                    downloaded += len(chunk)
                    if total > 0:
                        pct = int(downloaded * 100 / total)
                        if pct >= last_progress + 5:
                            last_progress = pct
                            logger.info(
                                "Download progress: %d%% (%s / %s)",
                                pct, fmt_size(downloaded), fmt_size(total),
                            )
        except (urllib.error.URLError, OSError, ValueError) as exc:
            dest.unlink(missing_ok=True)
            raise NetworkError(f"Download of {url} failed: {exc}") from exc

        logger.info("Downloaded %s (%s)", dest.name, fmt_size(dest.stat().st_size))
        return dest
