"""
CLI commands for managing installed versions.

Thin wrappers over ``evm.core.services.install_ops`` and
``evm.core.services.activation``.
"""

from __future__ import annotations

import json

import click

from evm.core.errors import NoActiveVersionError
from evm.ui.cli.helpers import get_app, handle_errors


def _echo_installed(versions: list[str], active: str | None) -> None:
    for v in versions:
        if v == active:
            click.secho(f" * {v}", fg="green", bold=True)
        else:
            click.echo(f"   {v}")


# ── Install / remove ────────────────────────────────────────────


@click.command()
@click.argument("version")
@click.pass_context
@handle_errors
def install(ctx: click.Context, version: str) -> None:
    """Download and install an Elasticsearch version."""
    app = get_app(ctx)
    click.secho(f"📦 Installing Elasticsearch {version}...", fg="cyan")

    result = app.installer.install(version)

    click.secho(f"✅ Installed Elasticsearch {version}", fg="green", bold=True)
    click.echo(f"   {result.path}")
    if result.activated:
        click.echo(f"   Now using Elasticsearch {version}")


@click.command()
@click.argument("version")
@click.pass_context
@handle_errors
def remove(ctx: click.Context, version: str) -> None:
    """Remove an installed (inactive) version."""
    app = get_app(ctx)
    app.installer.remove(version)
    click.secho(f"🗑️  Removed Elasticsearch {version}", fg="green")


# ── Activate ────────────────────────────────────────────────────


@click.command()
@click.argument("version")
@click.pass_context
@handle_errors
def use(ctx: click.Context, version: str) -> None:
    """Switch the active version."""
    app = get_app(ctx)
    result = app.activation.activate(version)

    if result.activated:
        click.secho(f"✅ Now using Elasticsearch {version}", fg="green", bold=True)
        return

    click.secho(f"⚠️  Elasticsearch {version} is not installed.", fg="yellow")
    if result.installed:
        click.echo("Installed versions:")
        _echo_installed(result.installed, result.previous)
    else:
        click.echo("No versions installed. Run 'evm install <version>'.")


# ── Inspect ─────────────────────────────────────────────────────


@click.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_errors
def list_versions(ctx: click.Context, as_json: bool) -> None:
    """List installed versions; the active one is marked with *."""
    app = get_app(ctx)
    versions = app.registry.list_installed()
    active = app.registry.current_version()
    dangling = app.registry.pointer_is_dangling()

    if as_json:
        click.echo(json.dumps(
            {"versions": versions, "active": active, "dangling_pointer": dangling},
            indent=2,
        ))
        return

    if dangling:
        click.secho(
            f"⚠️  Active link {app.registry.pointer.path} points to a missing directory",
            fg="yellow",
            err=True,
        )
    if not versions:
        click.echo("No versions installed.")
        return
    _echo_installed(versions, active)


@click.command()
@click.pass_context
@handle_errors
def version(ctx: click.Context) -> None:
    """Print the active version."""
    current = get_app(ctx).registry.current_version()
    if current is None:
        raise NoActiveVersionError()
    click.echo(current)


@click.command()
@click.argument("version", required=False)
@click.pass_context
@handle_errors
def which(ctx: click.Context, version: str | None) -> None:
    """Print the install path of VERSION (default: the active one)."""
    click.echo(str(get_app(ctx).installer.which(version)))
