"""
Error taxonomy — every abort condition the tool can hit.

Core services raise these; the CLI catches ``EvmError`` once, prints
the message to stderr and exits with ``exit_code``.  Nothing in the
core retries or recovers from them.
"""

from __future__ import annotations


class EvmError(Exception):
    """Base class for all terminal errors of a single invocation."""

    exit_code: int = 1


# ── Validation ──────────────────────────────────────────────────


class ValidationError(EvmError):
    """Raised when user input is malformed."""


class InvalidVersionError(ValidationError):
    """Raised when a version string does not match MAJOR.MINOR.PATCH[-pre]."""

    def __init__(self, version: str):
        super().__init__(f"Invalid version format: '{version}' (expected e.g. 8.9.0)")
        self.version = version


class InvalidOptionError(ValidationError):
    """Raised when a start option is not of the form ``key=value``."""


class UnknownSubcommandError(ValidationError):
    """Raised when a plugin subcommand is not list/install/remove."""


class UsageError(ValidationError):
    """Raised on missing or unexpected extra arguments."""


# ── State ───────────────────────────────────────────────────────


class StateError(EvmError):
    """Raised when the installation is not in the state an operation needs."""


class NoActiveVersionError(StateError):
    def __init__(self) -> None:
        super().__init__("No active Elasticsearch version. Run 'evm use <version>' first.")


class VersionAlreadyActiveError(StateError):
    def __init__(self, version: str):
        super().__init__(f"Elasticsearch {version} is already in use")
        self.version = version


class ServerRunningError(StateError):
    def __init__(self, pid: int):
        super().__init__(
            f"Elasticsearch is running (pid {pid}). Run 'evm stop' first."
        )
        self.pid = pid


class NotRunningError(StateError):
    def __init__(self) -> None:
        super().__init__("Elasticsearch is not running")


class VersionAlreadyInstalledError(StateError):
    def __init__(self, version: str):
        super().__init__(f"Elasticsearch {version} is already installed")
        self.version = version


class VersionNotInstalledError(StateError):
    def __init__(self, version: str):
        super().__init__(f"Elasticsearch {version} is not installed")
        self.version = version


class VersionInUseError(StateError):
    def __init__(self, version: str):
        super().__init__(
            f"Elasticsearch {version} is the active version and cannot be removed"
        )
        self.version = version


# ── Network / integrity ─────────────────────────────────────────


class NetworkError(EvmError):
    """Raised when a mirror cannot be reached or a transfer fails."""


class ArtifactNotFoundError(NetworkError):
    """Raised when no configured mirror serves the artifact."""


class IntegrityError(EvmError):
    """Raised when a downloaded artifact fails verification."""


class ChecksumMismatchError(IntegrityError):
    def __init__(self, artifact: str, algorithm: str):
        super().__init__(f"Checksum verification failed for {artifact} ({algorithm})")
        self.artifact = artifact
        self.algorithm = algorithm


# ── External tools / processes ──────────────────────────────────


class ExternalToolError(EvmError):
    """Raised when a delegated binary or the server process misbehaves."""


class PluginBinaryMissingError(ExternalToolError):
    """Raised when the plugin binary is missing or not executable."""


class ExternalCommandFailedError(ExternalToolError):
    def __init__(self, command: list[str], returncode: int):
        super().__init__(f"'{' '.join(command)}' exited with code {returncode}")
        self.command = command
        self.returncode = returncode


class StartupFailedError(ExternalToolError):
    """Raised when the server process exits before becoming ready."""


class SignalFailedError(ExternalToolError):
    """Raised when the termination signal cannot be delivered."""


class ExtractionError(ExternalToolError):
    """Raised when a downloaded archive cannot be unpacked."""


# ── Filesystem ──────────────────────────────────────────────────


class FilesystemError(EvmError):
    """Raised when the root directory cannot be modified as required."""


# ── Timeouts ────────────────────────────────────────────────────


class OperationTimeoutError(EvmError):
    """Raised when a bounded wait runs out."""


class StartupTimeoutError(OperationTimeoutError):
    """Raised when the server never answers its readiness endpoint."""


# ── Configuration ───────────────────────────────────────────────


class ConfigError(EvmError):
    """Raised when evm configuration is invalid or unreadable."""
