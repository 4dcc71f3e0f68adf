"""CLI context and dependency container."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from loguru import logger

from autodevops.cli.shared.console import CLIConsole, console
from autodevops.config import AutoDevOpsSettings, load_settings
from autodevops.deployment.constants import DeploymentConstants, DeploymentPaths
from autodevops.deployment.orchestrator import ReleaseOrchestrator
from autodevops.deployment.shell_commands import ShellCommands


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    project_root: Path
    commands: ShellCommands
    settings: AutoDevOpsSettings
    constants: DeploymentConstants
    paths: DeploymentPaths
    orchestrator: ReleaseOrchestrator


def configure_logging(verbose: bool) -> None:
    """Send diagnostics to stderr, DEBUG when verbose, WARNING otherwise."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def get_project_root() -> Path:
    """The project being built and deployed is the job's working directory."""
    return Path.cwd().resolve()


def build_cli_context(
    config_file: Path | None = None, env_file: Path | None = None
) -> CLIContext:
    """Build a fresh CLIContext.

    Raises:
        DeploymentError: If the configuration cannot be loaded
    """
    project_root = get_project_root()
    settings = load_settings(config_file=config_file, env_file=env_file)
    constants = DeploymentConstants()
    commands = ShellCommands(project_root)
    orchestrator = ReleaseOrchestrator(
        console, project_root, settings, commands=commands, constants=constants
    )

    return CLIContext(
        console=console,
        project_root=project_root,
        commands=commands,
        settings=settings,
        constants=constants,
        paths=orchestrator.paths,
        orchestrator=orchestrator,
    )


@dataclass(frozen=True)
class ConfigSources:
    """Config file locations chosen by the global CLI options."""

    config_file: Path | None = None
    env_file: Path | None = None


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, building it on first use.

    Settings are loaded lazily so ``--help`` works with an invalid
    environment.
    """
    if ctx is None:
        return build_cli_context()

    root = ctx.find_root()
    if isinstance(root.obj, CLIContext):
        return root.obj

    sources = root.obj if isinstance(root.obj, ConfigSources) else ConfigSources()
    cli_context = build_cli_context(sources.config_file, sources.env_file)
    if cli_context.settings.trace:
        configure_logging(True)
    root.obj = cli_context
    return cli_context
