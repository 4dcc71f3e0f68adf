"""Release commands.

Deploy, delete and inspect the release of a track, and manage its
database and application secret.
"""

from typing import Annotated

import typer

from autodevops.cli.context import get_cli_context
from autodevops.cli.shared.console import with_error_handling
from autodevops.deployment.constants import DeploymentConstants

_DEFAULT_TRACK = DeploymentConstants.DEFAULT_TRACK

TrackArgument = Annotated[
    str,
    typer.Argument(help="Release track (e.g. stable, canary, qa)"),
]


@with_error_handling
def deploy(ctx: typer.Context, track: TrackArgument = _DEFAULT_TRACK) -> None:
    """Provision the database, render the chart and roll out a track."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.console.print_header(f"Deploying track {track}")
    name = cli_ctx.orchestrator.deploy(track)
    cli_ctx.console.ok(f"Release {name} deployed")


@with_error_handling
def delete(ctx: typer.Context, track: TrackArgument = _DEFAULT_TRACK) -> None:
    """Delete every resource and the secret of a track."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.orchestrator.delete(track)


@with_error_handling
def create_secret(ctx: typer.Context, track: TrackArgument = _DEFAULT_TRACK) -> None:
    """Write K8S_SECRET_* variables into the track's application secret."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.orchestrator.create_secret(track)


@with_error_handling
def initialize_database(ctx: typer.Context, track: TrackArgument = _DEFAULT_TRACK) -> None:
    """Provision the enabled database for a track."""
    cli_ctx = get_cli_context(ctx)
    connection = cli_ctx.orchestrator.initialize_database(track)
    if connection.engine is not None:
        cli_ctx.console.ok(f"{connection.engine.value} database ready at {connection.host}")


@with_error_handling
def deploy_name(ctx: typer.Context, track: TrackArgument = _DEFAULT_TRACK) -> None:
    """Print the release name of a track."""
    cli_ctx = get_cli_context(ctx)
    typer.echo(cli_ctx.orchestrator.deploy_name(track))


@with_error_handling
def secret_name(ctx: typer.Context, track: TrackArgument = _DEFAULT_TRACK) -> None:
    """Print the application secret name of a track."""
    cli_ctx = get_cli_context(ctx)
    typer.echo(cli_ctx.orchestrator.secret_name(track))
