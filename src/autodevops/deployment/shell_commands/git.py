"""Git command abstractions.

This module provides commands for Git repository operations needed
before a build, namely bringing submodules up to date.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class GitCommands:
    """Git-related shell commands."""

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize Git commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def sync_submodules(self) -> CommandResult:
        """Synchronise submodule remote URLs with .gitmodules."""
        return self._runner.run(["git", "submodule", "sync"])

    def update_submodules(self) -> CommandResult:
        """Initialise and check out all submodules."""
        return self._runner.run(["git", "submodule", "update", "--init"])
