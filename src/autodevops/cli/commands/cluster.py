"""Cluster access and bootstrap commands."""

from typing import Annotated

import typer

from autodevops.cli.context import get_cli_context
from autodevops.cli.shared.console import with_error_handling
from autodevops.deployment.constants import DeploymentConstants


@with_error_handling
def kube_auth(
    ctx: typer.Context,
    cluster: Annotated[
        str,
        typer.Argument(help="Cluster selector (production, or e.g. qa for K8S_QA_*)"),
    ] = DeploymentConstants.DEFAULT_CLUSTER,
) -> None:
    """Configure and activate the kubectl context for a cluster."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.orchestrator.kube_auth(cluster)


@with_error_handling
def ensure_namespace(ctx: typer.Context) -> None:
    """Create KUBE_NAMESPACE if needed and label it."""
    cli_ctx = get_cli_context(ctx)
    namespace = cli_ctx.orchestrator.ensure_namespace()
    cli_ctx.console.ok(f"Namespace {namespace} ready")


@with_error_handling
def setup_helm(ctx: typer.Context) -> None:
    """Register the stable chart repository and update repositories."""
    cli_ctx = get_cli_context(ctx)
    cli_ctx.orchestrator.setup_helm()
    cli_ctx.console.ok("Helm repositories ready")
