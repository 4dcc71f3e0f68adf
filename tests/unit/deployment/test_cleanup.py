"""Tests for release teardown."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from autodevops.config import AutoDevOpsSettings
from autodevops.deployment.cleanup import CleanupManager
from autodevops.deployment.errors import DeploymentError
from autodevops.deployment.shell_commands import CommandResult


class TestCleanupManager:
    @pytest.fixture
    def cleanup(
        self,
        mock_commands: MagicMock,
        mock_console: MagicMock,
        settings: AutoDevOpsSettings,
    ) -> CleanupManager:
        return CleanupManager(mock_commands, mock_console, settings)

    def test_deletes_labeled_resources_and_secret(
        self, cleanup: CleanupManager, mock_commands: MagicMock
    ) -> None:
        cleanup.delete_release("canary")

        mock_commands.kubectl.delete_resources_by_label.assert_called_once_with(
            "pods,services,jobs,deployments,statefulsets,configmap,"
            "serviceaccount,rolebinding,role",
            "app-review",
            "release=review-app-canary",
        )
        mock_commands.kubectl.delete_resource.assert_called_once_with(
            "secret review-app-canary-secret", "app-review"
        )

    def test_stable_track_uses_bare_release_name(
        self, cleanup: CleanupManager, mock_commands: MagicMock
    ) -> None:
        cleanup.delete_release("stable")

        args = mock_commands.kubectl.delete_resources_by_label.call_args.args
        assert args[2] == "release=review-app"

    def test_kubectl_failure_raises(
        self, cleanup: CleanupManager, mock_commands: MagicMock
    ) -> None:
        mock_commands.kubectl.delete_resources_by_label.return_value = CommandResult(
            success=False, stderr="Unauthorized", returncode=1
        )

        with pytest.raises(DeploymentError, match="Failed to delete resources"):
            cleanup.delete_release("stable")

        mock_commands.kubectl.delete_resource.assert_not_called()
