"""Kubectl authentication against a named cluster."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .errors import DeploymentError

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings
    from autodevops.config.settings import ClusterCredentials

    from .constants import DeploymentPaths
    from .shell_commands import ShellCommands


class ClusterAuthenticator:
    """Registers credentials for a cluster and makes it the active context."""

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        settings: AutoDevOpsSettings,
        paths: DeploymentPaths,
    ) -> None:
        self.commands = commands
        self.console = console
        self.settings = settings
        self.paths = paths

    def credentials(self, cluster: str) -> ClusterCredentials:
        """Look up a complete credential set for a cluster selector.

        Raises:
            DeploymentError: If the selector is unknown or a field is empty
        """
        clusters = self.settings.kubernetes.clusters
        selector = cluster.lower()
        if selector not in clusters:
            known = ", ".join(sorted(clusters)) or "none"
            raise DeploymentError(
                f"Unknown cluster '{cluster}'",
                details=(
                    f"Configured clusters: {known}\n\n"
                    "The production cluster reads K8S_CLUSTER_NAME, K8S_TOKEN, "
                    "K8S_API_URL and K8S_CERTIFICATE; any other cluster <SEL> "
                    "reads the same keys as K8S_<SEL>_*."
                ),
            )

        credentials = clusters[selector]
        missing = credentials.missing_fields()
        if missing:
            raise DeploymentError(
                f"Incomplete credentials for cluster '{cluster}'",
                details=f"Missing: {', '.join(missing)}",
            )
        return credentials

    def authenticate(self, cluster: str) -> str:
        """Configure and activate the kubectl context for a cluster.

        Args:
            cluster: Cluster selector (e.g., "production", "qa")

        Returns:
            Name of the activated context

        Raises:
            DeploymentError: If credentials are unusable or kubectl fails
        """
        credentials = self.credentials(cluster)
        name = credentials.name
        ca_file = self.paths.ca_certificate
        ca_file.parent.mkdir(parents=True, exist_ok=True)
        ca_file.write_text(credentials.certificate, encoding="utf-8")
        logger.debug("Wrote CA certificate for {} to {}", name, ca_file)

        steps = [
            (
                "register cluster",
                lambda: self.commands.kubectl.set_cluster(
                    name, credentials.api_url, ca_file
                ),
            ),
            (
                "register credentials",
                lambda: self.commands.kubectl.set_credentials(
                    name, credentials.token.get_secret_value()
                ),
            ),
            (
                "register context",
                lambda: self.commands.kubectl.set_context(
                    name,
                    user=name,
                    cluster=name,
                    namespace=self.settings.kubernetes.namespace,
                ),
            ),
            ("switch context", lambda: self.commands.kubectl.use_context(name)),
        ]
        for description, step in steps:
            result = step()
            if not result.success:
                raise DeploymentError.from_result(
                    f"Failed to {description} for cluster {name}", result
                )

        self.console.print(f"[green]✓ Authenticated to cluster {name}[/green]")
        return name
