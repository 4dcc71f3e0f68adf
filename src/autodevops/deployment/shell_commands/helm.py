"""Helm command abstractions.

This module provides commands for Helm repository setup, chart fetching
and offline template rendering. Releases are never installed through
Helm itself; rendered manifests are applied with kubectl.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class HelmCommands:
    """Helm-related shell commands.

    Provides operations for:
    - Repository management (add, update)
    - Chart retrieval (pull and untar)
    - Template rendering to an output directory
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    # =========================================================================
    # Repositories
    # =========================================================================

    def repo_add(self, name: str, url: str) -> CommandResult:
        """Register (or refresh) a chart repository.

        Args:
            name: Local repository alias (e.g., "stable")
            url: Repository URL

        Returns:
            CommandResult with status
        """
        return self._runner.run(
            ["helm", "repo", "add", name, url, "--force-update"]
        )

    def repo_update(self) -> CommandResult:
        """Refresh the index of every registered repository."""
        return self._runner.run(["helm", "repo", "update"])

    # =========================================================================
    # Charts
    # =========================================================================

    def pull_chart(
        self,
        chart: str,
        untar_dir: Path,
        *,
        version: str | None = None,
    ) -> CommandResult:
        """Download a chart and unpack it into a directory.

        Args:
            chart: Chart reference (e.g., "stable/postgresql")
            untar_dir: Directory the chart is unpacked into
            version: Optional chart version constraint

        Returns:
            CommandResult with pull status
        """
        cmd = ["helm", "pull", chart, "--untar", "--untardir", str(untar_dir)]
        if version:
            cmd.extend(["--version", version])
        return self._runner.run(cmd)

    def template(
        self,
        release_name: str,
        chart_path: Path,
        output_dir: Path,
        *,
        namespace: str | None = None,
        value_files: list[Path] | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Render a chart's templates into an output directory.

        Helm writes one file per template under
        ``<output_dir>/<chart-name>/templates/``.

        Args:
            release_name: Release name used while rendering
            chart_path: Path to the chart directory
            output_dir: Directory receiving the rendered manifests
            namespace: Optional namespace passed to the chart
            value_files: Values files applied in order
            on_output: Optional callback for real-time output streaming

        Returns:
            CommandResult with render status
        """
        cmd = ["helm", "template", release_name, str(chart_path)]
        if namespace:
            cmd.extend(["--namespace", namespace])
        for vf in value_files or []:
            cmd.extend(["-f", str(vf)])
        cmd.extend(["--output-dir", str(output_dir)])

        if on_output:
            return self._runner.run_streaming(cmd, on_output=on_output)
        return self._runner.run(cmd)
