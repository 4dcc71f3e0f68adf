"""Workspace preparation steps shared by the pipeline jobs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .constants import DeploymentConstants
from .errors import DeploymentError

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings

    from .shell_commands import ShellCommands


class WorkspaceManager:
    """Registry login, submodules, namespace bootstrap and Helm repositories."""

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        settings: AutoDevOpsSettings,
        constants: DeploymentConstants | None = None,
    ) -> None:
        self.commands = commands
        self.console = console
        self.settings = settings
        self.constants = constants or DeploymentConstants()

    def registry_login(self) -> bool:
        """Log in to the container registry when a user is configured.

        Returns:
            True if a login was performed, False if it was skipped
        """
        registry = self.settings.registry
        if not registry.user:
            logger.debug("CI_REGISTRY_USER not set, skipping registry login")
            return False

        self.console.print("[dim]Logging in to the container registry...[/dim]")
        result = self.commands.docker.login(
            registry.registry, registry.user, registry.password.get_secret_value()
        )
        if not result.success:
            raise DeploymentError.from_result(
                f"Registry login failed for {registry.registry or 'default registry'}",
                result,
            )
        self.console.print("[green]✓ Logged in to container registry[/green]")
        return True

    def fetch_submodules(self) -> None:
        """Sync and initialize git submodules."""
        for description, step in (
            ("sync", self.commands.git.sync_submodules),
            ("update", self.commands.git.update_submodules),
        ):
            result = step()
            if not result.success:
                raise DeploymentError.from_result(
                    f"git submodule {description} failed", result
                )

    def ensure_namespace(self) -> str:
        """Create the target namespace if needed and label it."""
        namespace = self.settings.kubernetes.namespace
        if not namespace:
            raise DeploymentError("KUBE_NAMESPACE is not set")

        if not self.commands.kubectl.namespace_exists(namespace):
            result = self.commands.kubectl.create_namespace(namespace)
            if not result.success:
                raise DeploymentError.from_result(
                    f"Failed to create namespace {namespace}", result
                )
            self.console.print(f"[green]✓ Created namespace {namespace}[/green]")

        result = self.commands.kubectl.label_namespace(
            namespace, self.constants.NAMESPACE_LABEL, overwrite=True
        )
        if not result.success:
            raise DeploymentError.from_result(
                f"Failed to label namespace {namespace}", result
            )
        return namespace

    def setup_helm(self) -> None:
        """Register the stable chart repository and refresh repository indexes."""
        self.console.print("[dim]Setting up Helm[/dim]")
        result = self.commands.helm.repo_add(
            self.constants.STABLE_REPO_NAME, self.constants.STABLE_REPO_URL
        )
        if not result.success:
            raise DeploymentError.from_result("Failed to add the stable Helm repository", result)

        result = self.commands.helm.repo_update()
        if not result.success:
            raise DeploymentError.from_result("Failed to update Helm repositories", result)
