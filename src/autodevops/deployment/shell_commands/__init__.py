"""Shell command abstractions for image builds and Kubernetes releases.

This package provides a clean, well-documented interface for shell commands used
during a pipeline run. It is organized into specialized modules for each tool:

- docker: Registry login and image pull/build/push
- helm: Repository setup, chart pulls and template rendering
- kubectl: Kubeconfig, namespaces, manifests, deletion and waits
- git: Submodule maintenance

Design Principles:
- Single Responsibility: Each module focuses on one tool
- Argument Lists: Commands are built as sequences, never shell strings
- Consistent Return Types: Functions return CommandResult
- Separation of Concerns: Commands are decoupled from workflow logic

Usage:
    from autodevops.deployment.shell_commands import ShellCommands

    commands = ShellCommands(project_root=Path("."))
    if not commands.docker.pull_image("registry/app:master").success:
        print("No cache image available")
"""

from collections.abc import Mapping
from pathlib import Path

from .docker import DockerCommands
from .git import GitCommands
from .helm import HelmCommands
from .kubectl import KubectlCommands
from .runner import CommandRunner
from .types import CommandResult


class ShellCommands:
    """Unified interface for all shell command operations.

    This class provides a facade over the specialized command modules,
    offering a single point of access for pipeline operations while
    maintaining separation of concerns internally.

    Attributes:
        docker: Docker-related commands
        helm: Helm-related commands
        kubectl: Kubernetes kubectl commands
        git: Git repository commands
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize the shell commands executor.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
        """
        self._project_root = Path(project_root)
        self._runner = CommandRunner(self._project_root)

        # Initialize specialized command modules
        self.docker = DockerCommands(self._runner)
        self.helm = HelmCommands(self._runner)
        self.kubectl = KubectlCommands(self._runner)
        self.git = GitCommands(self._runner)

    @property
    def project_root(self) -> Path:
        """Get the project root path."""
        return self._project_root

    def run_make_target(
        self, target: str, env: Mapping[str, str] | None = None
    ) -> CommandResult:
        """Run a Makefile target with its output streamed to the terminal."""
        return self._runner.run(["make", target], capture_output=False, env=env)


__all__ = [
    "ShellCommands",
    "CommandResult",
    # Specialized command classes for direct usage
    "DockerCommands",
    "HelmCommands",
    "KubectlCommands",
    "GitCommands",
    "CommandRunner",
]
