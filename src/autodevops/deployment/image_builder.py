"""Multi-stage Docker image building with registry layer caching.

This module handles all image operations of the build job:
- Discovering named build stages in the Dockerfile
- Pulling prior master and branch images as layer cache
- Building every stage, then the final image, with commit and branch tags
- Pushing both tags to the registry
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from .constants import DeploymentConstants, DeploymentPaths
from .errors import DeploymentError

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings

    from .shell_commands import ShellCommands


STAGE_PATTERN = re.compile(r"^FROM\s+.+\s+AS\s+(\S+)\s*$", re.IGNORECASE | re.MULTILINE)


def discover_stages(dockerfile_text: str) -> list[str]:
    """Return the named build stages of a Dockerfile in order.

    Args:
        dockerfile_text: Dockerfile contents

    Returns:
        Stage names, de-duplicated, in order of first appearance
    """
    stages: list[str] = []
    for match in STAGE_PATTERN.finditer(dockerfile_text):
        stage = match.group(1)
        if stage not in stages:
            stages.append(stage)
    return stages


class BuildCache:
    """Ordered, de-duplicated list of cache image references.

    The list is persisted one reference per line so that every stage
    build of a run sees the references gathered by earlier stages.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def reset(self) -> None:
        """Start a new build run with an empty cache list."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("", encoding="utf-8")

    def refs(self) -> list[str]:
        if not self.path.exists():
            return []
        refs: list[str] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            ref = line.strip()
            if ref and ref not in refs:
                refs.append(ref)
        return refs

    def add(self, *refs: str) -> list[str]:
        """Append references not yet present and persist the list."""
        current = self.refs()
        for ref in refs:
            if ref and ref not in current:
                current.append(ref)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("".join(f"{ref}\n" for ref in current), encoding="utf-8")
        return current


class ImageBuilder:
    """Builds and pushes the application image and its named stages.

    Attributes:
        commands: Shell command executor
        console: CLI console for output
        settings: Pipeline settings
        paths: Deployment path resolver
        constants: Deployment configuration constants
        cache: Cache reference list for the current run
    """

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        settings: AutoDevOpsSettings,
        paths: DeploymentPaths,
        constants: DeploymentConstants | None = None,
    ) -> None:
        """Initialize the image builder.

        Args:
            commands: Shell command executor
            console: CLI console for output
            settings: Pipeline settings
            paths: Deployment path resolver
            constants: Optional deployment constants (uses defaults if not provided)
        """
        self.commands = commands
        self.console = console
        self.settings = settings
        self.paths = paths
        self.constants = constants or DeploymentConstants()
        self.cache = BuildCache(paths.build_cache)

    @property
    def dockerfile(self) -> Path:
        return self.paths.dockerfile(self.settings.registry.dockerfile)

    def build_all(self) -> list[str]:
        """Build and push every named stage, then the final image.

        Returns:
            Every tag pushed, in push order

        Raises:
            DeploymentError: If the Dockerfile is missing or any build or
                push fails
        """
        dockerfile = self.dockerfile
        if not dockerfile.is_file():
            raise DeploymentError(
                f"Dockerfile not found: {dockerfile}",
                details="Set DOCKER_BUILD_SOURCE to the Dockerfile path relative to the project root.",
            )

        self.cache.reset()
        stages = discover_stages(dockerfile.read_text(encoding="utf-8"))
        logger.info("Discovered {} build stage(s): {}", len(stages), stages)

        pushed: list[str] = []
        for stage in stages:
            self.console.print(f"[bold cyan]🔨 Building stage: {stage}[/bold cyan]")
            pushed.extend(self.build_stage(stage))

        self.console.print("[bold cyan]🔨 Building full image[/bold cyan]")
        pushed.extend(self.build_stage(None))
        return pushed

    def stage_tags(self, stage: str | None) -> tuple[str, str, str]:
        """Compute (commit tag, branch tag, master cache tag) for a stage."""
        registry = self.settings.registry
        suffix = f"-{stage}" if stage else ""
        base = registry.image_tag_base
        return (
            f"{registry.image_tag}{suffix}",
            f"{base}:{registry.ref_slug}{suffix}",
            f"{base}:{self.constants.MASTER_REF}{suffix}",
        )

    def build_stage(self, stage: str | None) -> list[str]:
        """Pull caches, build, tag and push one stage (or the final image).

        Args:
            stage: Build target name, or None for the final image

        Returns:
            The commit and branch tags that were pushed
        """
        commit_tag, branch_tag, master_tag = self.stage_tags(stage)

        self._pull_cache(master_tag, "latest master image")
        self._pull_cache(branch_tag, "branch specific image")

        result = self.commands.docker.build_image(
            self.dockerfile,
            self.paths.project_root,
            [commit_tag, branch_tag],
            cache_from=self.cache.refs(),
            target=stage,
            on_output=self.console.stream,
        )
        if not result.success:
            raise DeploymentError.from_result(
                f"Image build failed for {stage or 'final image'}", result
            )

        # The freshly built commit tag is a valid cache for later stages
        self.cache.add(commit_tag)

        self.console.print("[dim]Pushing to container registry...[/dim]")
        for tag in (commit_tag, branch_tag):
            push = self.commands.docker.push_image(tag, on_output=self.console.stream)
            if not push.success:
                raise DeploymentError.from_result(f"Failed to push {tag}", push)

        self.console.print(f"[green]✓ Pushed {commit_tag}[/green]")
        return [commit_tag, branch_tag]

    def _pull_cache(self, ref: str, label: str) -> None:
        result = self.commands.docker.pull_image(ref)
        if result.success:
            self.cache.add(ref)
            self.console.print(f"[dim]✓ Downloaded build cache from {label}[/dim]")
            return

        logger.warning("Cache pull failed for {}: {}", ref, result.output.strip())
        self.console.warn(f"Pulling {label} failed, building without it")
