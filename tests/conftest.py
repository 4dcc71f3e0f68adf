from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from autodevops.config import AutoDevOpsSettings, build_settings
from autodevops.deployment.constants import DeploymentPaths
from autodevops.deployment.shell_commands import CommandResult

# Environment of a typical review-app pipeline job
BASE_ENV: dict[str, str] = {
    "CI_REGISTRY": "registry.example.com",
    "CI_REGISTRY_IMAGE": "registry.example.com/group/app",
    "CI_COMMIT_SHA": "abc123",
    "CI_COMMIT_REF_NAME": "feature/new_thing",
    "KUBE_NAMESPACE": "app-review",
    "CI_PROJECT_PATH_SLUG": "group-app",
    "CI_ENVIRONMENT_SLUG": "review-app",
    "CI_ENVIRONMENT_URL": "https://review-app.example.com",
    "WAIT_TIMEOUT_SECONDS": "30",
    "WAIT_INTERVAL_SECONDS": "1",
}

# Methods returning CommandResult that succeed unless a test says otherwise
_COMMAND_METHODS: dict[str, tuple[str, ...]] = {
    "docker": ("login", "pull_image", "build_image", "push_image"),
    "helm": ("repo_add", "repo_update", "pull_chart", "template"),
    "kubectl": (
        "set_cluster",
        "set_credentials",
        "set_context",
        "use_context",
        "create_namespace",
        "label_namespace",
        "apply",
        "replace",
        "replace_from_stdin",
        "delete_resource",
        "delete_resources_by_label",
        "wait_for",
    ),
    "git": ("sync_submodules", "update_submodules"),
}


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., AutoDevOpsSettings]:
    """Build settings from the base environment plus overrides."""

    def _make(**overrides: str) -> AutoDevOpsSettings:
        values = {
            **BASE_ENV,
            "DEVOPS_SCRATCH_DIR": str(tmp_path / "scratch"),
            **overrides,
        }
        return build_settings(values)

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., AutoDevOpsSettings]) -> AutoDevOpsSettings:
    return make_settings()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def paths(project_root: Path, settings: AutoDevOpsSettings) -> DeploymentPaths:
    return DeploymentPaths(project_root, settings.scratch_dir)


@pytest.fixture
def mock_commands(project_root: Path) -> MagicMock:
    """Shell commands whose every call succeeds by default."""
    commands = MagicMock()
    commands.project_root = project_root
    for group, methods in _COMMAND_METHODS.items():
        for method in methods:
            getattr(getattr(commands, group), method).return_value = CommandResult(
                success=True
            )
    commands.kubectl.namespace_exists.return_value = True
    commands.run_make_target.return_value = CommandResult(success=True)
    return commands


@pytest.fixture
def mock_console() -> MagicMock:
    return MagicMock()
