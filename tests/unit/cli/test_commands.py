"""Tests for the command line surface."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

from autodevops.cli import app
from autodevops.cli.context import CLIContext
from autodevops.deployment.database import DatabaseConnection, DatabaseEngine
from autodevops.deployment.errors import DeploymentError

runner = CliRunner()


@pytest.fixture
def orchestrator():
    mock = Mock()
    mock.deploy_name.side_effect = lambda track: (
        "review-app" if track == "stable" else f"review-app-{track}"
    )
    mock.secret_name.side_effect = lambda track: f"{mock.deploy_name(track)}-secret"
    mock.build.return_value = ["app:abc", "app:main"]
    mock.registry_login.return_value = True
    return mock


@pytest.fixture
def cli_context(orchestrator):
    context = CLIContext(
        console=Mock(),
        project_root=Path("/test"),
        commands=Mock(),
        settings=Mock(trace=False),
        constants=Mock(),
        paths=Mock(),
        orchestrator=orchestrator,
    )
    with patch("autodevops.cli.context.build_cli_context", return_value=context) as mock_build:
        yield mock_build


def test_help_lists_pipeline_commands():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("build", "deploy", "kube-auth", "secret-name"):
        assert command in result.output


def test_deploy_name_prints_release_name(cli_context):
    result = runner.invoke(app, ["deploy-name", "canary"])

    assert result.exit_code == 0
    assert result.output.strip() == "review-app-canary"


def test_track_defaults_to_stable(cli_context, orchestrator):
    result = runner.invoke(app, ["secret-name"])

    assert result.exit_code == 0
    assert result.output.strip() == "review-app-secret"


def test_global_options_reach_settings_loader(cli_context):
    result = runner.invoke(
        app, ["--config", "ci.yml", "--env-file", "ci.env", "deploy-name"]
    )

    assert result.exit_code == 0
    cli_context.assert_called_once_with(Path("ci.yml"), Path("ci.env"))


def test_deploy_runs_orchestrator(cli_context, orchestrator):
    result = runner.invoke(app, ["deploy", "qa"])

    assert result.exit_code == 0
    orchestrator.deploy.assert_called_once_with("qa")


def test_build_and_test_commands(cli_context, orchestrator):
    assert runner.invoke(app, ["build"]).exit_code == 0
    assert runner.invoke(app, ["test"]).exit_code == 0

    orchestrator.build.assert_called_once_with()
    orchestrator.test.assert_called_once_with()


def test_kube_auth_defaults_to_production(cli_context, orchestrator):
    result = runner.invoke(app, ["kube-auth"])

    assert result.exit_code == 0
    orchestrator.kube_auth.assert_called_once_with("production")


def test_initialize_database_without_engine(cli_context, orchestrator):
    orchestrator.initialize_database.return_value = DatabaseConnection(engine=None)

    result = runner.invoke(app, ["initialize-database", "canary"])

    assert result.exit_code == 0
    orchestrator.initialize_database.assert_called_once_with("canary")


def test_initialize_database_with_engine(cli_context, orchestrator):
    orchestrator.initialize_database.return_value = DatabaseConnection(
        engine=DatabaseEngine.MYSQL, host="review-app-mysql"
    )

    result = runner.invoke(app, ["initialize-database"])

    assert result.exit_code == 0
    orchestrator.initialize_database.assert_called_once_with("stable")


def test_failure_exit_code_follows_tool(cli_context, orchestrator):
    orchestrator.test.side_effect = DeploymentError("make ci-command failed", returncode=2)

    result = runner.invoke(app, ["test"])

    assert result.exit_code == 2


def test_configuration_error_exits_one():
    with patch(
        "autodevops.cli.context.build_cli_context",
        side_effect=DeploymentError("Invalid configuration", details="bad port"),
    ):
        result = runner.invoke(app, ["deploy"])

    assert result.exit_code == 1


def test_env_file_option_feeds_real_settings(tmp_path, monkeypatch):
    monkeypatch.delenv("CI_ENVIRONMENT_SLUG", raising=False)
    monkeypatch.setenv("DEVOPS_SCRATCH_DIR", str(tmp_path / "scratch"))
    env_file = tmp_path / "ci.env"
    env_file.write_text("CI_ENVIRONMENT_SLUG=review-app\n")

    result = runner.invoke(app, ["--env-file", str(env_file), "deploy-name", "qa"])

    assert result.exit_code == 0
    assert result.output == "review-app-qa\n"


def test_config_option_feeds_real_settings(tmp_path, monkeypatch):
    monkeypatch.delenv("CI_ENVIRONMENT_SLUG", raising=False)
    monkeypatch.setenv("DEVOPS_SCRATCH_DIR", str(tmp_path / "scratch"))
    config = tmp_path / "autodevops.yaml"
    config.write_text("CI_ENVIRONMENT_SLUG: from-yaml\n")

    result = runner.invoke(
        app,
        [
            "--config",
            str(config),
            "--env-file",
            str(tmp_path / "missing.env"),
            "secret-name",
        ],
    )

    assert result.exit_code == 0
    assert result.output == "from-yaml-secret\n"
