"""Release teardown.

Removes every labeled resource of a track plus its application Secret.
Resources that are already gone are not errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import DeploymentConstants
from .errors import DeploymentError
from .naming import application_secret_name, deploy_name

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings

    from .shell_commands import ShellCommands


class CleanupManager:
    """Deletes the resources belonging to a release track."""

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        settings: AutoDevOpsSettings,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the cleanup manager.

        Args:
            commands: Shell command executor
            console: CLI console for output
            settings: Pipeline settings
            constants: Optional deployment constants
        """
        self.commands = commands
        self.console = console
        self.settings = settings
        self.constants = constants or DeploymentConstants()

    def delete_release(self, track: str) -> None:
        """Delete a track's labeled resources and its Secret.

        Args:
            track: Release track

        Raises:
            DeploymentError: If kubectl fails for a reason other than absence
        """
        slug = self.settings.application.environment_slug
        name = deploy_name(slug, track)
        namespace = self.settings.kubernetes.namespace

        self.console.print(f"[bold cyan]🧹 Deleting release {name}...[/bold cyan]")

        result = self.commands.kubectl.delete_resources_by_label(
            self.constants.release_resource_types,
            namespace,
            f"release={name}",
        )
        if not result.success:
            raise DeploymentError.from_result(f"Failed to delete resources of {name}", result)

        secret = application_secret_name(slug, track)
        result = self.commands.kubectl.delete_resource(f"secret {secret}", namespace)
        if not result.success:
            raise DeploymentError.from_result(f"Failed to delete secret {secret}", result)

        self.console.print(f"[green]✓ Release {name} deleted[/green]")
