"""
evm — CLI entrypoint.

Usage:
    evm --help
    evm install 8.9.0
    evm use 8.9.0
    evm start -E cluster.name=dev
"""

from __future__ import annotations

import click

from evm import __version__
from evm.core.config.loader import load_settings
from evm.core.context import build_context
from evm.core.errors import EvmError
from evm.core.observability.logging_config import configure_from_flags
from evm.ui.cli.helpers import abort


class EvmGroup(click.Group):
    """Root group whose usage mistakes exit 1, like every other abort."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.group(cls=EvmGroup, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", prog_name="evm")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """evm — Elasticsearch version manager.

    Installs several Elasticsearch versions side by side under $EVM_HOME
    (default ~/.evm), switches between them, and runs the active one.
    """
    ctx.ensure_object(dict)
    configure_from_flags(verbose=verbose, quiet=quiet, debug=debug)

    # Tests inject a pre-built context.
    if "app" in ctx.obj:
        return

    try:
        settings = load_settings(program_name=ctx.find_root().info_name)
    except EvmError as e:
        abort(e)
    ctx.obj["app"] = build_context(settings)


from evm.ui.cli.plugin import plugin  # noqa: E402
from evm.ui.cli.server import start, status, stop  # noqa: E402
from evm.ui.cli.versions import (  # noqa: E402
    install,
    list_versions,
    remove,
    use,
    version,
    which,
)

cli.add_command(install)
cli.add_command(use)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(status)
cli.add_command(remove)
cli.add_command(list_versions)
cli.add_command(version)
cli.add_command(which)
cli.add_command(plugin)


if __name__ == "__main__":
    cli()
