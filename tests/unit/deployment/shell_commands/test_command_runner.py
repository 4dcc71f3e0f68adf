"""Tests for the low-level command runner."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest

from autodevops.deployment.shell_commands.runner import CommandRunner, redact


@pytest.fixture
def runner():
    """Create a CommandRunner rooted at a fake project."""
    return CommandRunner(Path("/test/project"))


class TestRedact:
    def test_plain_command_is_unchanged(self):
        assert redact(["docker", "pull", "app:1"]) == "docker pull app:1"

    def test_token_flag_with_equals_is_masked(self):
        rendered = redact(["kubectl", "config", "set-credentials", "prod", "--token=s3cret"])

        assert "s3cret" not in rendered
        assert rendered.endswith("--token=***")

    def test_separate_password_argument_is_masked(self):
        rendered = redact(["docker", "login", "-u", "ci", "-p", "hunter2", "registry"])

        assert rendered == "docker login -u ci -p *** registry"


@patch("subprocess.run")
def test_run_executes_in_project_root(mock_run, runner):
    """Test that run() passes the argument list and default cwd."""
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=0, stdout="ok\n", stderr=""
    )

    result = runner.run(["helm", "repo", "update"])

    assert result.success
    assert result.stdout == "ok\n"
    args, kwargs = mock_run.call_args
    assert args[0] == ["helm", "repo", "update"]
    assert kwargs["cwd"] == Path("/test/project")
    assert kwargs["env"] is None


@patch("subprocess.run")
def test_run_reports_failure(mock_run, runner):
    """Test that a non-zero exit becomes an unsuccessful result."""
    mock_run.return_value = subprocess.CompletedProcess(
        args=[], returncode=3, stdout="", stderr="boom"
    )

    result = runner.run(["kubectl", "get", "pods"])

    assert not result.success
    assert result.returncode == 3
    assert result.stderr == "boom"


@patch("subprocess.run")
def test_run_sends_input_on_stdin(mock_run, runner):
    """Test that input_data is forwarded to the subprocess."""
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)

    runner.run(["docker", "login", "--password-stdin"], input_data="token")

    assert mock_run.call_args.kwargs["input"] == "token"


@patch("subprocess.run")
def test_run_layers_env_over_process_environment(mock_run, runner, monkeypatch):
    """Test that extra variables are merged onto os.environ."""
    monkeypatch.setenv("EXISTING_VAR", "kept")
    mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)

    runner.run(["make", "ci-command"], env={"DOCKER_HOST": "tcp://localhost:2375"})

    env = mock_run.call_args.kwargs["env"]
    assert env["EXISTING_VAR"] == "kept"
    assert env["DOCKER_HOST"] == "tcp://localhost:2375"


@patch("subprocess.run", side_effect=FileNotFoundError)
def test_run_missing_executable_returns_127(mock_run, runner):
    """Test that a missing binary is reported like a shell would."""
    result = runner.run(["helm", "version"])

    assert not result.success
    assert result.returncode == 127
    assert "helm" in result.stderr


@patch("subprocess.Popen")
def test_run_streaming_forwards_lines(mock_popen, runner):
    """Test that run_streaming calls the callback for each non-empty line."""
    process = MagicMock()
    process.stdout.readline.side_effect = ["Step 1/3\n", "\n", "Step 2/3\n", ""]
    process.returncode = 0
    mock_popen.return_value = process
    lines = []

    result = runner.run_streaming(["docker", "build", "."], on_output=lines.append)

    assert lines == ["Step 1/3", "Step 2/3"]
    assert result.success
    assert result.stdout == "Step 1/3\nStep 2/3"
    assert mock_popen.call_args.kwargs["env"]["PYTHONUNBUFFERED"] == "1"


@patch("subprocess.Popen")
def test_run_streaming_writes_input(mock_popen, runner):
    """Test that run_streaming feeds stdin and closes it."""
    process = MagicMock()
    process.stdout.readline.side_effect = [""]
    process.returncode = 1
    mock_popen.return_value = process

    result = runner.run_streaming(["kubectl", "replace", "-f", "-"], input_data="kind: Secret")

    process.stdin.write.assert_called_once_with("kind: Secret")
    process.stdin.close.assert_called_once()
    assert not result.success
    assert result.returncode == 1


@patch("subprocess.Popen", side_effect=FileNotFoundError)
def test_run_streaming_missing_executable_returns_127(mock_popen, runner):
    """Test that streaming runs report a missing binary the same way."""
    result = runner.run_streaming(["docker", "build", "."], on_output=Mock())

    assert result.returncode == 127
