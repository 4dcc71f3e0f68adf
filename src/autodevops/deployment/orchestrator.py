"""Pipeline job orchestration.

This module provides the ReleaseOrchestrator class which composes the
specialized components used by each pipeline job:
- Image building and pushing
- Database provisioning
- Application secret management
- Chart rendering and rollout
- Cluster authentication
- Release teardown
- Workspace preparation and CI tests
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .ci_tests import CITestRunner
from .cleanup import CleanupManager
from .cluster_auth import ClusterAuthenticator
from .constants import DeploymentConstants, DeploymentPaths
from .database import DatabaseConnection, DatabaseProvisioner
from .errors import DeploymentError
from .image_builder import ImageBuilder
from .naming import application_secret_name, deploy_name
from .release import ReleaseManager
from .secret_manager import SecretManager
from .shell_commands import ShellCommands
from .workspace import WorkspaceManager

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings


class ReleaseOrchestrator:
    """Entry point for every pipeline job.

    Each public method corresponds to one CLI command and runs its
    workflow linearly; the first failing step raises DeploymentError.

    Attributes:
        constants: Deployment configuration constants
        paths: Deployment path resolver
        commands: Shell command executor
        workspace: Registry, submodule, namespace and Helm setup
        image_builder: Multi-stage image builder
        database: Database provisioner
        secrets: Application secret manager
        releases: Chart render and rollout manager
        cluster_auth: Kubectl context configuration
        cleanup: Release teardown
        ci_tests: CI test runner
    """

    def __init__(
        self,
        console: CLIConsole,
        project_root: Path,
        settings: AutoDevOpsSettings,
        commands: ShellCommands | None = None,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            console: CLI console for output
            project_root: Path to the project root directory
            settings: Pipeline settings
            commands: Optional shell command executor
            constants: Optional deployment constants
        """
        self.console = console
        self.settings = settings
        self.constants = constants or DeploymentConstants()
        self.paths = DeploymentPaths(project_root, settings.scratch_dir)
        self.commands = commands or ShellCommands(project_root)

        self.workspace = WorkspaceManager(
            self.commands, console, settings, self.constants
        )
        self.image_builder = ImageBuilder(
            self.commands, console, settings, self.paths, self.constants
        )
        self.database = DatabaseProvisioner(
            self.commands, console, settings, self.paths, self.constants
        )
        self.secrets = SecretManager(self.commands, console, settings)
        self.releases = ReleaseManager(
            self.commands,
            console,
            settings,
            self.paths,
            database=self.database,
            constants=self.constants,
        )
        self.cluster_auth = ClusterAuthenticator(
            self.commands, console, settings, self.paths
        )
        self.cleanup = CleanupManager(self.commands, console, settings, self.constants)
        self.ci_tests = CITestRunner(
            self.commands, console, settings, self.workspace, self.constants
        )

    def _environment_slug(self) -> str:
        slug = self.settings.application.environment_slug
        if not slug:
            raise DeploymentError("CI_ENVIRONMENT_SLUG is not set")
        return slug

    def _require_release_target(self) -> None:
        """Fail before touching the cluster when release names would be blank."""
        self._environment_slug()
        if not self.settings.kubernetes.namespace:
            raise DeploymentError("KUBE_NAMESPACE is not set")

    def deploy_name(self, track: str) -> str:
        return deploy_name(self._environment_slug(), track)

    def secret_name(self, track: str) -> str:
        return application_secret_name(self._environment_slug(), track)

    def build(self) -> list[str]:
        """Fetch submodules, log in, then build and push every image stage."""
        self.workspace.fetch_submodules()
        self.workspace.registry_login()
        return self.image_builder.build_all()

    def test(self) -> None:
        self.ci_tests.run()

    def deploy(self, track: str) -> str:
        self._require_release_target()
        return self.releases.deploy(track)

    def delete(self, track: str) -> None:
        self._require_release_target()
        self.cleanup.delete_release(track)

    def create_secret(self, track: str) -> str:
        self._require_release_target()
        return self.secrets.create_application_secret(track)

    def initialize_database(self, track: str) -> DatabaseConnection:
        self._require_release_target()
        return self.database.provision(track)

    def kube_auth(self, cluster: str) -> str:
        return self.cluster_auth.authenticate(cluster)

    def ensure_namespace(self) -> str:
        return self.workspace.ensure_namespace()

    def setup_helm(self) -> None:
        self.workspace.setup_helm()

    def registry_login(self) -> bool:
        return self.workspace.registry_login()

    def fetch_submodules(self) -> None:
        self.workspace.fetch_submodules()
