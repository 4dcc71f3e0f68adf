"""Deployment constants and configuration.

This module centralizes all magic strings, paths, and configuration values
used throughout the build and release process.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DeploymentConstants:
    """Constants for image builds and Kubernetes releases.

    This class provides a centralized location for all deployment-related
    constants, making them easy to find, update, and test.

    All attributes are class-level and immutable.
    """

    # Defaults for positional CLI arguments
    DEFAULT_TRACK: str = "stable"
    DEFAULT_CLUSTER: str = "production"

    # Image tags
    MASTER_REF: str = "master"
    DEFAULT_DOCKERFILE: str = "Dockerfile"

    # Scratch space for caches, certificates and rendered manifests
    DEFAULT_SCRATCH_DIR: str = "/tmp/devops"

    # Environment variables projected into the application secret
    SECRET_ENV_PREFIX: str = "K8S_SECRET_"

    # Helm repositories and database charts
    STABLE_REPO_NAME: str = "stable"
    STABLE_REPO_URL: str = "https://charts.helm.sh/stable"
    POSTGRES_CHART: str = "stable/postgresql"
    POSTGRES_CHART_VERSION: str = "3.10.1"
    MYSQL_CHART: str = "stable/mysql"
    POSTGRES_PORT: int = 5432
    MYSQL_PORT: int = 3306

    # Rendered job templates applied before the main workload
    INIT_JOB_TEMPLATE: str = "00-init-job.yaml"
    MIGRATE_JOB_TEMPLATE: str = "01-migrate-job.yaml"

    # Application defaults
    DEFAULT_SERVICE_PORT: int = 8000

    # Waits
    WAIT_TIMEOUT_SECONDS: float = 600.0
    WAIT_INTERVAL_SECONDS: float = 5.0

    # Namespace bootstrap
    NAMESPACE_LABEL: str = "app=kubed"

    # Kinds removed by teardown, all selected by the release label
    RELEASE_RESOURCE_KINDS: tuple[str, ...] = (
        "pods",
        "services",
        "jobs",
        "deployments",
        "statefulsets",
        "configmap",
        "serviceaccount",
        "rolebinding",
        "role",
    )

    # CI test runner
    CI_MAKE_TARGET: str = "ci-command"
    CI_DOCKER_HOST: str = "tcp://localhost:2375"
    CI_APP_COMMAND: str = "make test-setup && make test"

    @property
    def release_resource_types(self) -> str:
        """Comma-separated kinds for a single label-based delete."""
        return ",".join(self.RELEASE_RESOURCE_KINDS)


class DeploymentPaths:
    """Path resolver for deployment-related directories and files.

    This class constructs and provides access to all paths needed during
    a pipeline run, derived from the project root and the scratch
    directory that holds per-job artifacts.
    """

    def __init__(self, project_root: Path, scratch_dir: Path) -> None:
        """Initialize deployment paths.

        Args:
            project_root: Path to the project root directory
            scratch_dir: Directory for transient per-job artifacts
        """
        self.project_root = project_root
        self.scratch_dir = scratch_dir

        # Build derived paths
        self.ci_configuration = scratch_dir / "ci-configuration"
        self.default_chart = self.ci_configuration / "helm"
        self.database_charts = self.ci_configuration / "database" / "helm"
        self.database_manifests = self.ci_configuration / "database" / "manifests"
        self.manifests = scratch_dir / "manifests"

    @property
    def project_chart(self) -> Path:
        """Get path to the project's own Helm chart."""
        return self.project_root / "helm"

    @property
    def build_cache(self) -> Path:
        """Get path to the build cache reference list."""
        return self.scratch_dir / "build-cache"

    @property
    def ca_certificate(self) -> Path:
        """Get path the cluster CA certificate is written to."""
        return self.scratch_dir / "ca.crt"

    def release_manifests(self, track: str) -> Path:
        """Get the rendered application manifest directory for a track."""
        return self.manifests / track

    def release_values(self, track: str) -> Path:
        """Get the generated values file for a track's release."""
        return self.scratch_dir / f"values-{track}.yaml"

    def database_output(self, track: str) -> Path:
        """Get the rendered database manifest directory for a track."""
        return self.database_manifests / track

    def database_values(self, track: str) -> Path:
        """Get the generated values file for a track's database."""
        return self.ci_configuration / "database" / f"values-{track}.yaml"

    def dockerfile(self, source: str) -> Path:
        """Resolve a Dockerfile path relative to the project root."""
        path = Path(source)
        return path if path.is_absolute() else self.project_root / path
