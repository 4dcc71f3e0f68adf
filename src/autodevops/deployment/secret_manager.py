"""Application secret management for Kubernetes releases.

Every ``K8S_SECRET_<KEY>`` variable becomes key ``<KEY>`` of a single
Opaque Secret named ``<deploy_name>-secret``. The manifest is rendered
locally and piped to a forced ``kubectl replace``, which creates the
Secret when it is absent and recreates it otherwise.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import yaml
from loguru import logger

from .errors import DeploymentError
from .naming import application_secret_name

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings

    from .shell_commands import ShellCommands


def render_secret_manifest(
    name: str, namespace: str, variables: Mapping[str, str]
) -> str:
    """Render an Opaque Secret manifest as YAML.

    Values are base64-encoded from their UTF-8 bytes exactly as given.

    Args:
        name: Secret name
        namespace: Target namespace
        variables: Key/value pairs to store (may be empty)

    Returns:
        YAML manifest text
    """
    manifest: dict[str, Any] = {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name, "namespace": namespace},
        "type": "Opaque",
        "data": {
            key: base64.b64encode(value.encode("utf-8")).decode("ascii")
            for key, value in variables.items()
        },
    }
    return yaml.safe_dump(manifest, default_flow_style=False, sort_keys=False)


class SecretManager:
    """Manages the application Secret of a release track.

    Handles:
    - Projecting prefixed variables into Secret data
    - Creating or replacing the Secret in the namespace
    """

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        settings: AutoDevOpsSettings,
    ) -> None:
        """Initialize the secret manager.

        Args:
            commands: Shell command executor
            console: CLI console for output
            settings: Pipeline settings
        """
        self.commands = commands
        self.console = console
        self.settings = settings

    def secret_name(self, track: str) -> str:
        return application_secret_name(self.settings.application.environment_slug, track)

    def create_application_secret(self, track: str) -> str:
        """Create or replace the application Secret for a track.

        Args:
            track: Release track

        Returns:
            Name of the Secret written

        Raises:
            DeploymentError: If kubectl rejects the manifest
        """
        name = self.secret_name(track)
        namespace = self.settings.kubernetes.namespace
        variables = self.settings.secret_variables

        # Keys only, values never reach the logs
        logger.debug("Secret {} keys: {}", name, sorted(variables))
        self.console.print(
            f"[bold cyan]🔐 Writing secret {name} ({len(variables)} key(s))...[/bold cyan]"
        )

        manifest = render_secret_manifest(name, namespace, variables)
        result = self.commands.kubectl.replace_from_stdin(manifest, namespace, force=True)
        if not result.success:
            raise DeploymentError.from_result(f"Failed to write secret {name}", result)

        self.console.print(f"[green]✓ Secret {name} written to namespace {namespace}[/green]")
        return name
