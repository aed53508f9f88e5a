"""
Smoke tests — verify the bootstrap is healthy.

- Package imports successfully
- CLI entrypoint responds
- Every documented command is registered
"""

from click.testing import CliRunner

from evm import __version__
from evm.main import cli


class TestBootstrap:
    def test_version_is_set(self):
        assert __version__
        assert isinstance(__version__, str)

    def test_cli_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_commands_registered(self):
        expected = {
            "install", "use", "start", "stop", "status",
            "remove", "list", "version", "which", "plugin",
        }
        assert expected <= set(cli.commands)

    def test_subcommand_help(self):
        result = CliRunner().invoke(cli, ["start", "-h"])
        assert result.exit_code == 0
        assert "KEY=VALUE" in result.output
