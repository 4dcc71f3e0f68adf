"""Command runner for executing shell commands.

This module provides the base command execution functionality used by
all specialized command modules.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from loguru import logger

from .types import CommandResult

# Flags whose following argument must never reach the logs
_SENSITIVE_FLAGS = frozenset({"--token", "-p", "--password"})

# Exit status a shell reports for a missing executable
COMMAND_NOT_FOUND = 127


def redact(cmd: Sequence[str]) -> str:
    """Render a command for logging with credential arguments masked.

    Args:
        cmd: Command and arguments

    Returns:
        Space-joined command line safe to log
    """
    rendered: list[str] = []
    hide_next = False
    for arg in cmd:
        if hide_next:
            rendered.append("***")
            hide_next = False
            continue
        flag, sep, _ = arg.partition("=")
        if sep and flag in _SENSITIVE_FLAGS:
            rendered.append(f"{flag}=***")
            continue
        if arg in _SENSITIVE_FLAGS:
            hide_next = True
        rendered.append(arg)
    return " ".join(rendered)


class CommandRunner:
    """Low-level command executor with consistent result handling.

    This class provides the foundation for executing shell commands with
    proper output capture, error handling, and streaming support.

    All specialized command modules (Docker, Helm, kubectl, etc.) use
    this runner for actual command execution.
    """

    def __init__(self, project_root: Path) -> None:
        """Initialize the command runner.

        Args:
            project_root: Path to the project root directory.
                         Commands will be executed from this directory by default.
        """
        self.project_root = project_root

    def _environment(self, env: Mapping[str, str] | None) -> dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
        input_data: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Execute a shell command and return structured result.

        A missing executable is reported as a failed result with return
        code 127, the same status a shell would give.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to project_root)
            capture_output: Whether to capture stdout/stderr
            input_data: Optional text sent to the command's stdin
            env: Extra environment variables layered over os.environ

        Returns:
            CommandResult with success status, output, and return code
        """
        logger.debug("Executing: {}", redact(cmd))
        try:
            result = subprocess.run(
                list(cmd),
                cwd=cwd or self.project_root,
                capture_output=capture_output,
                text=True,
                input=input_data,
                env=self._environment(env),
            )
        except FileNotFoundError:
            return CommandResult(
                success=False,
                stderr=f"Required command not found: {cmd[0]}",
                returncode=COMMAND_NOT_FOUND,
            )

        if result.returncode != 0:
            logger.debug("Command exited with {}: {}", result.returncode, redact(cmd))

        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    def run_streaming(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        on_output: Callable[[str], None] | None = None,
        input_data: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Execute a shell command with real-time output streaming.

        This method runs a command and calls the on_output callback for each
        line of output, allowing real-time progress display.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to project_root)
            on_output: Callback function called with each line of output.
                      If None, output is collected but not streamed.
            input_data: Optional text sent to the command's stdin
            env: Extra environment variables layered over os.environ

        Returns:
            CommandResult with success status, collected output, and return code
        """
        logger.debug("Executing (streaming): {}", redact(cmd))

        process_env = self._environment(env) or os.environ.copy()
        # Set environment to disable output buffering
        process_env["PYTHONUNBUFFERED"] = "1"

        try:
            process = subprocess.Popen(
                list(cmd),
                cwd=cwd or self.project_root,
                stdin=subprocess.PIPE if input_data is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,  # Merge stderr into stdout
                text=True,
                bufsize=1,
                env=process_env,
            )
        except FileNotFoundError:
            return CommandResult(
                success=False,
                stderr=f"Required command not found: {cmd[0]}",
                returncode=COMMAND_NOT_FOUND,
            )

        if input_data is not None and process.stdin:
            process.stdin.write(input_data)
            process.stdin.close()

        stdout_lines: list[str] = []

        # Read output line by line
        if process.stdout:
            for line in iter(process.stdout.readline, ""):
                line = line.rstrip("\n")
                if line:  # Only process non-empty lines
                    stdout_lines.append(line)
                    if on_output:
                        on_output(line)

        process.wait()

        return CommandResult(
            success=process.returncode == 0,
            stdout="\n".join(stdout_lines),
            stderr="",  # stderr is merged into stdout
            returncode=process.returncode or 0,
        )
