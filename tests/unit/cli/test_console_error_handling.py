import pytest
import typer

from autodevops.cli.shared.console import with_error_handling
from autodevops.deployment.errors import DeploymentError


def test_with_error_handling_handles_deployment_error():
    @with_error_handling
    def _command() -> None:
        raise DeploymentError("Boom", details="extra")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


def test_with_error_handling_propagates_tool_returncode():
    @with_error_handling
    def _command() -> None:
        raise DeploymentError("make ci-command failed", returncode=2)

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 2


def test_with_error_handling_handles_keyboard_interrupt():
    @with_error_handling
    def _command() -> None:
        raise KeyboardInterrupt

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 130


def test_with_error_handling_leaves_success_alone():
    calls = []

    @with_error_handling
    def _command(track: str) -> None:
        calls.append(track)

    _command("canary")

    assert calls == ["canary"]
