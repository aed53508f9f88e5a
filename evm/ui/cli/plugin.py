"""
CLI command proxying to the active version's plugin tool.
"""

from __future__ import annotations

import click

from evm.ui.cli.helpers import get_app, handle_errors


@click.command()
@click.argument("subcommand")
@click.argument("args", nargs=-1)
@click.pass_context
@handle_errors
def plugin(ctx: click.Context, subcommand: str, args: tuple[str, ...]) -> None:
    """Manage plugins: list | install NAME | remove NAME."""
    get_app(ctx).plugins.run(subcommand, args)
