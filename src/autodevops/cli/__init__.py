"""Main CLI application module.

This module provides the main entry point for the Auto DevOps CLI. Each
command maps to one step of a CI pipeline job:

- build / test: image build and CI test run
- deploy / delete: release rollout and teardown of a track
- create-secret / initialize-database: per-track secret and database
- kube-auth / ensure-namespace / setup-helm: cluster access and bootstrap
- registry-login / fetch-submodules: workspace preparation
- deploy-name / secret-name: computed names for scripting
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from .commands import cluster, image, release
from .context import ConfigSources, configure_logging

# Create the main CLI application
app = typer.Typer(
    help="🚀 Auto DevOps - build, test and deploy to Kubernetes",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="YAML file of environment-style keys (lowest precedence)",
        ),
    ] = None,
    env_file: Annotated[
        Path,
        typer.Option("--env-file", help="Dotenv file layered over --config"),
    ] = Path(".env"),
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every executed command"),
    ] = False,
) -> None:
    """Auto DevOps pipeline steps."""
    configure_logging(verbose or bool(os.environ.get("TRACE")))
    ctx.obj = ConfigSources(config_file=config, env_file=env_file)


# Build and test jobs
app.command("build")(image.build)
app.command("test")(image.test)
app.command("registry-login")(image.registry_login)
app.command("fetch-submodules")(image.fetch_submodules)

# Release jobs
app.command("deploy")(release.deploy)
app.command("delete")(release.delete)
app.command("create-secret")(release.create_secret)
app.command("initialize-database")(release.initialize_database)
app.command("deploy-name")(release.deploy_name)
app.command("secret-name")(release.secret_name)

# Cluster access
app.command("kube-auth")(cluster.kube_auth)
app.command("ensure-namespace")(cluster.ensure_namespace)
app.command("setup-helm")(cluster.setup_helm)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
