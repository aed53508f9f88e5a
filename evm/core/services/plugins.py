"""
Plugin proxy — forward list/install/remove to the active version's plugin tool.

Three generations of the plugin tool exist:

    1.x   bin/plugin                 --list / --install X / --remove X
    2.x   bin/plugin                 list / install X / remove X
    3.x+  bin/elasticsearch-plugin   list / install X / remove X
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from evm.adapters.shell import CommandRunner
from evm.core.errors import (
    ExternalCommandFailedError,
    NoActiveVersionError,
    PluginBinaryMissingError,
    UnknownSubcommandError,
    UsageError,
)
from evm.core.models.version import major_of
from evm.core.services.registry import VersionRegistry

logger = logging.getLogger(__name__)

# subcommand → number of arguments it takes
SUBCOMMANDS: dict[str, int] = {
    "list": 0,
    "install": 1,
    "remove": 1,
}


@dataclass(frozen=True)
class PluginDialect:
    binary: str
    flag_prefix: str

    def command(self, home: Path, subcommand: str, args: Sequence[str]) -> list[str]:
        return [str(home / "bin" / self.binary), f"{self.flag_prefix}{subcommand}", *args]


LEGACY_FLAGS = PluginDialect(binary="plugin", flag_prefix="--")
LEGACY_WORDS = PluginDialect(binary="plugin", flag_prefix="")
MODERN = PluginDialect(binary="elasticsearch-plugin", flag_prefix="")


def dialect_for(version: str) -> PluginDialect:
    major = major_of(version)
    if major <= 1:
        return LEGACY_FLAGS
    if major == 2:
        return LEGACY_WORDS
    return MODERN


def validate_plugin_args(subcommand: str, args: Sequence[str]) -> None:
    if subcommand not in SUBCOMMANDS:
        raise UnknownSubcommandError(
            f"Unknown plugin command '{subcommand}'. "
            f"Valid: {', '.join(SUBCOMMANDS)}"
        )
    expected = SUBCOMMANDS[subcommand]
    if len(args) < expected:
        raise UsageError(f"'plugin {subcommand}' requires a plugin name")
    if len(args) > expected:
        raise UsageError(
            f"Unexpected arguments for 'plugin {subcommand}': {' '.join(args[expected:])}"
        )


class PluginProxy:
    def __init__(self, registry: VersionRegistry, runner: CommandRunner):
        self.registry = registry
        self.runner = runner

    def resolve_command(self, subcommand: str, args: Sequence[str]) -> list[str]:
        """Full command line for the active version, validated but not run."""
        validate_plugin_args(subcommand, args)

        version = self.registry.current_version()
        if version is None:
            raise NoActiveVersionError()

        cmd = dialect_for(version).command(self.registry.active_home(), subcommand, args)
        binary = Path(cmd[0])
        if not binary.is_file():
            raise PluginBinaryMissingError(f"Plugin tool not found: {binary}")
        if not os.access(binary, os.X_OK):
            raise PluginBinaryMissingError(f"Plugin tool is not executable: {binary}")
        return cmd

    def run(self, subcommand: str, args: Sequence[str] = ()) -> list[str]:
        """Run a plugin subcommand against the active version.

        Raises:
            UnknownSubcommandError / UsageError: Bad subcommand or arity.
            NoActiveVersionError: Nothing is active.
            PluginBinaryMissingError: The tool is missing or not executable.
            ExternalCommandFailedError: The tool exited non-zero.
        """
        cmd = self.resolve_command(subcommand, list(args))
        logger.info("Running %s", " ".join(cmd))
        returncode = self.runner.run(cmd, cwd=self.registry.active_home())
        if returncode != 0:
            raise ExternalCommandFailedError(cmd, returncode)
        return cmd
