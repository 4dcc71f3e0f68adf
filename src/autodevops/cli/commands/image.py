"""Image and workspace commands used by the build and test jobs."""

import typer

from autodevops.cli.context import get_cli_context
from autodevops.cli.shared.console import with_error_handling


@with_error_handling
def build(ctx: typer.Context) -> None:
    """Build and push every Dockerfile stage, then the final image."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.console.print_header("Building application image")
    pushed = cli_ctx.orchestrator.build()
    cli_ctx.console.ok(f"Pushed {len(pushed)} tag(s)")


@with_error_handling
def test(ctx: typer.Context) -> None:
    """Pull the commit image and run the project's CI make target."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.orchestrator.test()


@with_error_handling
def registry_login(ctx: typer.Context) -> None:
    """Log in to the container registry when credentials are set."""
    cli_ctx = get_cli_context(ctx)
    if not cli_ctx.orchestrator.registry_login():
        cli_ctx.console.info("CI_REGISTRY_USER not set, skipping registry login")


@with_error_handling
def fetch_submodules(ctx: typer.Context) -> None:
    """Sync and initialize git submodules."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.orchestrator.fetch_submodules()
    cli_ctx.console.ok("Submodules up to date")
