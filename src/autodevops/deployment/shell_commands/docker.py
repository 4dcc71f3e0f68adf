"""Docker command abstractions.

This module provides commands for Docker registry and image operations:
logging in, pulling cache images, building (optionally a single stage of
a multi-stage Dockerfile) and pushing tags.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class DockerCommands:
    """Docker-related shell commands.

    Provides operations for:
    - Registry authentication
    - Image management (pull, build, push)
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Docker commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Registry
    # =========================================================================

    def login(self, registry: str, username: str, password: str) -> CommandResult:
        """Log in to a container registry.

        The password is written to stdin so it never appears in the
        process list or in logged command lines.

        Args:
            registry: Registry host (e.g., "registry.gitlab.com")
            username: Registry user
            password: Registry password or token

        Returns:
            CommandResult with login status
        """
        cmd = ["docker", "login", "-u", username, "--password-stdin"]
        if registry:
            cmd.append(registry)
        return self._runner.run(cmd, input_data=password)

    # =========================================================================
    # Image Management
    # =========================================================================

    def pull_image(self, image_tag: str) -> CommandResult:
        """Pull an image from its registry.

        Args:
            image_tag: Full image reference (e.g., "registry/app:master")

        Returns:
            CommandResult with pull status
        """
        return self._runner.run(["docker", "pull", image_tag])

    def build_image(
        self,
        dockerfile: Path,
        context: Path,
        tags: Sequence[str],
        *,
        cache_from: Sequence[str] = (),
        target: str | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Build an image from a Dockerfile.

        Args:
            dockerfile: Path to the Dockerfile
            context: Build context directory
            tags: Tags applied to the built image
            cache_from: Image references used as layer cache sources
            target: Optional multi-stage build target
            on_output: Optional callback for real-time output streaming

        Returns:
            CommandResult with build status

        Example:
            >>> docker.build_image(
            ...     Path("Dockerfile"),
            ...     Path("."),
            ...     ["registry/app:abc123-builder"],
            ...     cache_from=["registry/app:master-builder"],
            ...     target="builder",
            ... )
        """
        cmd = ["docker", "build"]
        for ref in cache_from:
            cmd.extend(["--cache-from", ref])
        for tag in tags:
            cmd.extend(["-t", tag])
        cmd.extend(["-f", str(dockerfile)])
        if target:
            cmd.extend(["--target", target])
        cmd.append(str(context))

        if on_output:
            return self._runner.run_streaming(cmd, on_output=on_output)
        return self._runner.run(cmd)

    def push_image(
        self,
        image_tag: str,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Push a Docker image to a remote registry.

        Args:
            image_tag: Full image tag including registry
                      (e.g., "registry.example.com/app:v1")
            on_output: Optional callback for real-time output streaming

        Returns:
            CommandResult with push status
        """
        cmd = ["docker", "push", image_tag]
        if on_output:
            return self._runner.run_streaming(cmd, on_output=on_output)
        return self._runner.run(cmd)
