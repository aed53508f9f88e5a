"""
CLI commands for the server process — start, stop, status.
"""

from __future__ import annotations

import json

import click

from evm.ui.cli.helpers import get_app, handle_errors


@click.command()
@click.option(
    "-E",
    "options",
    multiple=True,
    metavar="KEY=VALUE",
    help="Setting passed to Elasticsearch (repeatable).",
)
@click.pass_context
@handle_errors
def start(ctx: click.Context, options: tuple[str, ...]) -> None:
    """Start the active version in the background."""
    app = get_app(ctx)
    click.secho("🚀 Starting Elasticsearch...", fg="cyan")

    status = app.supervisor.start(options)

    click.secho(
        f"✅ Elasticsearch {status.version} is running (pid {status.pid})",
        fg="green",
        bold=True,
    )


@click.command()
@click.pass_context
@handle_errors
def stop(ctx: click.Context) -> None:
    """Stop the running server."""
    app = get_app(ctx)
    click.secho("⏹  Stopping Elasticsearch...", fg="cyan")
    pid = app.supervisor.stop()
    click.secho(f"✅ Elasticsearch stopped (pid {pid})", fg="green")


@click.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_errors
def status(ctx: click.Context, as_json: bool) -> None:
    """Report whether the server is running."""
    app = get_app(ctx)
    result = app.supervisor.status()

    if as_json:
        data = result.to_dict()
        data["dangling_pointer"] = app.registry.pointer_is_dangling()
        click.echo(json.dumps(data, indent=2))
        return

    if app.registry.pointer_is_dangling():
        click.secho("⚠️  Active version link points to a missing directory", fg="yellow", err=True)

    label = f"Elasticsearch {result.version}" if result.version else "Elasticsearch"
    if result.running:
        click.secho(f"✅ {label} is running (pid {result.pid})", fg="green")
    else:
        click.echo(f"⏹  {label} is not running")
