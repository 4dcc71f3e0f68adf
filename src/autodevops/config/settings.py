"""Typed settings for a single pipeline invocation.

Every component receives an ``AutoDevOpsSettings`` instance instead of
reading exported environment variables. The models are frozen so a run
cannot mutate its own configuration halfway through.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from autodevops.deployment.constants import DeploymentConstants


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class RegistrySettings(_Frozen):
    """Container registry and image naming inputs."""

    registry: str = ""
    registry_image: str = ""
    image_name: str = ""
    user: str = ""
    password: SecretStr = SecretStr("")
    commit_sha: str = ""
    commit_ref_name: str = ""
    dockerfile: str = DeploymentConstants.DEFAULT_DOCKERFILE

    @property
    def image_tag_base(self) -> str:
        """Repository part shared by every tag of the application image."""
        if self.image_name:
            return f"{self.registry_image}/{self.image_name}"
        return self.registry_image

    @property
    def image_tag(self) -> str:
        """Canonical image reference for the current commit."""
        return f"{self.image_tag_base}:{self.commit_sha}"

    @property
    def ref_slug(self) -> str:
        """Branch name made safe for use as an image tag."""
        return self.commit_ref_name.replace("_", "-").replace("/", "-")


class ClusterCredentials(_Frozen):
    """Connection details for one Kubernetes cluster."""

    name: str = ""
    token: SecretStr = SecretStr("")
    api_url: str = ""
    certificate: str = ""

    def missing_fields(self) -> list[str]:
        """Names of credential fields that are empty."""
        missing = []
        if not self.name:
            missing.append("cluster name")
        if not self.token.get_secret_value():
            missing.append("token")
        if not self.api_url:
            missing.append("API URL")
        if not self.certificate:
            missing.append("certificate")
        return missing


class KubernetesSettings(_Frozen):
    """Target namespace and the credential sets of known clusters."""

    namespace: str = ""
    clusters: dict[str, ClusterCredentials] = Field(default_factory=dict)


class DatabaseSettings(_Frozen):
    """Database engine switches and connection inputs."""

    postgres_enabled: bool = False
    mysql_enabled: bool = False
    user: str = ""
    password: SecretStr = SecretStr("")
    name: str = ""
    url: str = ""
    track_urls: dict[str, str] = Field(default_factory=dict)
    postgres_version_tag: str = ""
    mysql_version_tag: str = ""

    def url_override(self, track: str) -> str:
        """Return the explicitly configured URL for a track, or "".

        ``K8S_<TRACK>_DATABASE_URL`` wins over ``DATABASE_URL``.
        """
        key = track.upper().replace("-", "_")
        return self.track_urls.get(key) or self.url


class ApplicationSettings(_Frozen):
    """Inputs describing the deployed application."""

    project_path_slug: str = ""
    environment_slug: str = ""
    environment_url: str = ""
    service_port: int = Field(
        default=DeploymentConstants.DEFAULT_SERVICE_PORT, ge=1, le=65535
    )
    initialize_command: str = ""
    migrate_command: str = ""


class AutoDevOpsSettings(_Frozen):
    """Complete configuration for one pipeline invocation."""

    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    secret_variables: dict[str, str] = Field(default_factory=dict)
    scratch_dir: Path = Path(DeploymentConstants.DEFAULT_SCRATCH_DIR)
    wait_timeout: float = Field(default=DeploymentConstants.WAIT_TIMEOUT_SECONDS, gt=0)
    wait_interval: float = Field(default=DeploymentConstants.WAIT_INTERVAL_SECONDS, gt=0)
    trace: bool = False
