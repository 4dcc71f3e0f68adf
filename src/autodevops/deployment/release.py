"""Application release rendering and rollout.

This module handles the deploy job of a track:
- Scaffolding the default chart when the project ships none
- Rendering the chart with per-track overrides from a generated values file
- Re-running the initialize and migrate Jobs synchronously
- Applying the remaining manifests and waiting for the deployment
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from .constants import DeploymentConstants, DeploymentPaths
from .errors import DeploymentError
from .naming import application_secret_name, deploy_name
from .polling import require_ready, wait_for_condition
from .values import read_chart_name, reset_directory, write_values_file

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings

    from .database import DatabaseConnection, DatabaseProvisioner
    from .shell_commands import ShellCommands


class ReleaseManager:
    """Renders and rolls out the application chart of a track.

    Handles:
    - Default chart scaffolding
    - Values override file generation
    - Delete-then-apply of one-shot Jobs
    - Workload apply and availability wait
    """

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        settings: AutoDevOpsSettings,
        paths: DeploymentPaths,
        database: DatabaseProvisioner,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the release manager.

        Args:
            commands: Shell command executor
            console: CLI console for output
            settings: Pipeline settings
            paths: Deployment path resolver
            database: Provisioner run before the chart is rendered
            constants: Optional deployment constants
        """
        self.commands = commands
        self.console = console
        self.settings = settings
        self.paths = paths
        self.database = database
        self.constants = constants or DeploymentConstants()

    def deploy(self, track: str) -> str:
        """Deploy the application for a track.

        Args:
            track: Release track

        Returns:
            The release name that became available

        Raises:
            DeploymentError: If any render, apply or wait step fails
        """
        name = deploy_name(self.settings.application.environment_slug, track)
        namespace = self.settings.kubernetes.namespace

        chart = self.ensure_chart()
        connection = self.database.provision(track)
        templates = self.render(track, chart, connection)

        application = self.settings.application
        if application.initialize_command:
            self.console.print("[bold cyan]Applying initialization command...[/bold cyan]")
            self.run_job(
                f"{name}-initialize",
                templates / self.constants.INIT_JOB_TEMPLATE,
                namespace,
            )
        if application.migrate_command:
            self.console.print("[bold cyan]Applying migration command...[/bold cyan]")
            self.run_job(
                f"{name}-migrate",
                templates / self.constants.MIGRATE_JOB_TEMPLATE,
                namespace,
            )

        self.console.print("[bold cyan]🚀 Deploying application[/bold cyan]")
        self.console.print(f"[dim]Namespace: {namespace}[/dim]")
        self.console.print(f"[dim]Track: {track}[/dim]")
        self.console.print(f"[dim]Image: {self.settings.registry.image_tag}[/dim]")

        result = self.commands.kubectl.apply(
            templates, namespace, recursive=True, on_output=self.console.stream
        )
        if not result.success:
            raise DeploymentError.from_result("Failed to apply application manifests", result)

        with self.console.status(f"[cyan]Waiting for deployment {name}...[/cyan]"):
            wait = wait_for_condition(
                self.commands.kubectl,
                "available",
                namespace,
                resource=f"deployments/{name}",
                timeout=self.settings.wait_timeout,
                interval=self.settings.wait_interval,
            )
        require_ready(wait, f"deployment {name}")

        self.console.print(f"[green]✓ Deployment {name} is available[/green]")
        return name

    def ensure_chart(self) -> Path:
        """Return the project chart, copying the shared default when absent."""
        chart = self.paths.project_chart
        if chart.is_dir():
            return chart

        source = self.paths.default_chart
        if not source.is_dir():
            raise DeploymentError(
                "No Helm chart available",
                details=(
                    f"The project has no chart at {chart} and the default chart "
                    f"is missing from {source}."
                ),
            )

        shutil.copytree(source, chart)
        self.console.print(f"[dim]Copied default Helm chart into {chart}[/dim]")
        return chart

    def override_values(
        self, track: str, connection: DatabaseConnection
    ) -> dict[str, Any]:
        """Per-track values layered over the chart's own defaults."""
        application = self.settings.application
        slug = application.environment_slug
        return {
            "namespace": self.settings.kubernetes.namespace,
            "image": self.settings.registry.image_tag,
            "gitlab": {"app": application.project_path_slug, "env": slug},
            "releaseOverride": slug,
            "application": {
                "track": track,
                "database_url": connection.url,
                "database_host": connection.host,
                "secretName": application_secret_name(slug, track),
                "initializeCommand": application.initialize_command,
                "migrateCommand": application.migrate_command,
            },
            "service": {
                "url": application.environment_url,
                "targetPort": application.service_port,
            },
        }

    def render(
        self, track: str, chart: Path, connection: DatabaseConnection
    ) -> Path:
        """Render the chart for a track and return its templates directory."""
        name = deploy_name(self.settings.application.environment_slug, track)
        values_file = write_values_file(
            self.paths.release_values(track), self.override_values(track, connection)
        )
        output_dir = reset_directory(self.paths.release_manifests(track))

        result = self.commands.helm.template(
            name,
            chart,
            output_dir,
            namespace=self.settings.kubernetes.namespace,
            value_files=[values_file],
        )
        if not result.success:
            raise DeploymentError.from_result("Failed to render the application chart", result)

        templates = output_dir / read_chart_name(chart) / "templates"
        logger.debug("Rendered {} into {}", chart, templates)
        return templates

    def run_job(self, job_name: str, manifest: Path, namespace: str) -> None:
        """Re-run a one-shot Job and wait for it to complete.

        Jobs are immutable, so any previous run is deleted before the new
        manifest is applied. The manifest is removed afterwards so the
        workload apply does not recreate the Job.

        Raises:
            DeploymentError: If the manifest is missing or the Job fails
        """
        if not manifest.is_file():
            raise DeploymentError(
                f"Rendered job manifest not found: {manifest}",
                details="The chart must provide this template when the matching command is set.",
            )

        result = self.commands.kubectl.delete_resource(f"jobs/{job_name}", namespace)
        if not result.success:
            raise DeploymentError.from_result(f"Failed to delete previous job {job_name}", result)

        result = self.commands.kubectl.apply(manifest, namespace)
        if not result.success:
            raise DeploymentError.from_result(f"Failed to apply job {job_name}", result)

        with self.console.status(f"[cyan]Waiting for job {job_name}...[/cyan]"):
            wait = wait_for_condition(
                self.commands.kubectl,
                "complete",
                namespace,
                resource=f"jobs/{job_name}",
                timeout=self.settings.wait_timeout,
                interval=self.settings.wait_interval,
            )
        require_ready(wait, f"job {job_name}")

        manifest.unlink()
        self.console.print(f"[green]✓ Job {job_name} completed[/green]")
