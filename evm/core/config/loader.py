"""
Configuration loader — resolves the installation root and settings.

Settings are built once at startup and handed to every component
through ``AppContext``.  The root directory comes from ``EVM_HOME``
or defaults to ``~/.<program-name>``.  An optional ``config.yml``
inside the root overrides the remaining defaults (mirrors, timeouts,
readiness endpoint).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from evm.core.errors import ConfigError, FilesystemError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "EVM_HOME"
CONFIG_FILE = "config.yml"
DEFAULT_PROGRAM_NAME = "evm"

# Mirror templates are tried in order; ``{version}`` is substituted.
DEFAULT_MIRRORS = [
    "https://artifacts.elastic.co/downloads/elasticsearch",
    "https://download.elastic.co/elasticsearch/elasticsearch",
    "https://download.elasticsearch.org/elasticsearch/elasticsearch",
    "https://download.elastic.co/elasticsearch/release/org/elasticsearch/distribution/tar/elasticsearch/{version}",
]

DEFAULT_CHECKSUM_EXTENSIONS = ["sha512", "sha1", "sha1.txt"]


class EvmSettings(BaseModel):
    """Process-wide settings, constructed once per invocation."""

    product: str = "elasticsearch"
    home: Path

    mirrors: list[str] = Field(default_factory=lambda: list(DEFAULT_MIRRORS))
    checksum_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CHECKSUM_EXTENSIONS)
    )

    # ── Network ──────────────────────────────────────────────────
    probe_timeout: int = 60
    transfer_timeout: int = 3600

    # ── Process supervision ──────────────────────────────────────
    readiness_url: str = "http://localhost:9200"
    readiness_attempts: int = 300
    poll_interval: float = 1.0
    process_marker: str = "org.elasticsearch.bootstrap.Elasticsearch"
    security_setting: str = "xpack.security.enabled"

    @property
    def pointer_path(self) -> Path:
        """The symlink that designates the active version."""
        return self.home / self.product

    @property
    def pid_file(self) -> Path:
        """PID hint handed to the server; not read back by evm."""
        return self.home / f"{self.product}.pid"

    @property
    def dir_prefix(self) -> str:
        return f"{self.product}-"

    def version_dir(self, version: str) -> Path:
        return self.home / f"{self.dir_prefix}{version}"


def default_home(
    environ: Mapping[str, str] | None = None,
    program_name: str | None = None,
) -> Path:
    """Resolve the installation root from the environment or program name."""
    env = os.environ if environ is None else environ
    override = env.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()

    name = Path(program_name or sys.argv[0] or DEFAULT_PROGRAM_NAME).stem
    # Running as ``python -m evm.main`` gives no useful name.
    if name in ("__main__", "main", "python", "-c", ""):
        name = DEFAULT_PROGRAM_NAME
    return Path.home() / f".{name}"


def load_settings(
    environ: Mapping[str, str] | None = None,
    program_name: str | None = None,
) -> EvmSettings:
    """Build settings from defaults, the environment and ``config.yml``.

    Raises:
        ConfigError: If ``config.yml`` exists but is unreadable or invalid.
    """
    home = default_home(environ, program_name)
    data: dict = {}

    config_path = home / CONFIG_FILE
    if config_path.is_file():
        logger.debug("Loading evm config from %s", config_path)
        try:
            raw = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e

        try:
            loaded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Expected a YAML mapping in {config_path}, got {type(loaded).__name__}"
            )
        data.update(loaded)

    # The root is never taken from the config file it lives in.
    data["home"] = home

    try:
        settings = EvmSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid evm configuration: {e}") from e

    logger.debug("Installation root: %s", settings.home)
    return settings


def ensure_home(settings: EvmSettings) -> Path:
    """Create the installation root on first use."""
    if not settings.home.is_dir():
        logger.info("Creating installation root %s", settings.home)
        try:
            settings.home.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Cannot create installation root {settings.home}: {e}") from e
    return settings.home
