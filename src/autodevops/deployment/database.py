"""Ephemeral per-track database provisioning.

A track gets at most one database, rendered from a stable Helm chart and
force-replaced into the namespace. MySQL wins when both engines are
enabled; with neither enabled nothing is provisioned.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from .constants import DeploymentConstants, DeploymentPaths
from .errors import DeploymentError
from .naming import deploy_name
from .polling import require_ready, wait_for_condition
from .values import reset_directory, write_values_file

if TYPE_CHECKING:
    from autodevops.cli.shared.console import CLIConsole
    from autodevops.config import AutoDevOpsSettings
    from autodevops.config.settings import DatabaseSettings

    from .shell_commands import ShellCommands


class DatabaseEngine(str, Enum):
    """Supported database engines."""

    POSTGRES = "postgres"
    MYSQL = "mysql"


@dataclass(frozen=True)
class EngineSpec:
    """Chart and connection details of one engine."""

    chart: str
    chart_version: str | None
    port: int
    scheme: str

    @property
    def chart_dir_name(self) -> str:
        """Directory ``helm pull --untar`` creates for the chart."""
        return self.chart.rsplit("/", 1)[-1]


def engine_specs(
    constants: DeploymentConstants | None = None,
) -> dict[DatabaseEngine, EngineSpec]:
    """Chart and connection details of every engine, read from ``constants``."""
    constants = constants or DeploymentConstants()
    return {
        DatabaseEngine.POSTGRES: EngineSpec(
            chart=constants.POSTGRES_CHART,
            chart_version=constants.POSTGRES_CHART_VERSION,
            port=constants.POSTGRES_PORT,
            scheme="postgres",
        ),
        DatabaseEngine.MYSQL: EngineSpec(
            chart=constants.MYSQL_CHART,
            chart_version=None,
            port=constants.MYSQL_PORT,
            scheme="mysql",
        ),
    }


@dataclass(frozen=True)
class DatabaseConnection:
    """Connection descriptor handed to the application chart."""

    engine: DatabaseEngine | None
    host: str = ""
    user: str = ""
    password: str = field(default="", repr=False)
    name: str = ""
    url: str = field(default="", repr=False)


def select_engine(database: DatabaseSettings) -> DatabaseEngine | None:
    """Pick the engine to provision; None unless one is explicitly enabled."""
    if database.mysql_enabled:
        return DatabaseEngine.MYSQL
    if database.postgres_enabled:
        return DatabaseEngine.POSTGRES
    return None


def build_connection(
    settings: AutoDevOpsSettings,
    track: str,
    constants: DeploymentConstants | None = None,
) -> DatabaseConnection:
    """Assemble the connection descriptor for a track.

    An explicit URL (``K8S_<TRACK>_DATABASE_URL`` then ``DATABASE_URL``)
    always wins over the URL built from the engine defaults.
    """
    database = settings.database
    engine = select_engine(database)
    override = database.url_override(track)
    password = database.password.get_secret_value()

    if engine is None:
        return DatabaseConnection(
            engine=None,
            user=database.user,
            password=password,
            name=database.name,
            url=override,
        )

    spec = engine_specs(constants)[engine]
    host = f"{deploy_name(settings.application.environment_slug, track)}-{engine.value}"
    auto_url = (
        f"{spec.scheme}://{database.user}:{password}@{host}:{spec.port}/{database.name}"
    )
    return DatabaseConnection(
        engine=engine,
        host=host,
        user=database.user,
        password=password,
        name=database.name,
        url=override or auto_url,
    )


class DatabaseProvisioner:
    """Renders, applies and waits for a track's database.

    Attributes:
        commands: Shell command executor
        console: CLI console for output
        settings: Pipeline settings
        paths: Deployment path resolver
        constants: Deployment configuration constants
    """

    def __init__(
        self,
        commands: ShellCommands,
        console: CLIConsole,
        settings: AutoDevOpsSettings,
        paths: DeploymentPaths,
        constants: DeploymentConstants | None = None,
    ) -> None:
        self.commands = commands
        self.console = console
        self.settings = settings
        self.paths = paths
        self.constants = constants or DeploymentConstants()

    def provision(self, track: str) -> DatabaseConnection:
        """Provision the enabled database for a track.

        Args:
            track: Release track

        Returns:
            Connection descriptor (with an empty host when no engine is enabled)

        Raises:
            DeploymentError: If rendering, applying or the readiness wait fails
        """
        connection = build_connection(self.settings, track, self.constants)
        if connection.engine is None:
            logger.info("No database engine enabled for track {}", track)
            self.console.print("[dim]No database enabled, skipping provisioning[/dim]")
            return connection

        engine = connection.engine
        spec = engine_specs(self.constants)[engine]
        name = deploy_name(self.settings.application.environment_slug, track)
        namespace = self.settings.kubernetes.namespace

        self.console.print(f"[bold cyan]🗄️  Setting up {engine.value} database...[/bold cyan]")

        chart_path = self._pull_chart(spec)
        values_file = write_values_file(
            self.paths.database_values(track), self.chart_values(engine, connection)
        )
        output_dir = reset_directory(self.paths.database_output(track))

        result = self.commands.helm.template(
            name,
            chart_path,
            output_dir,
            namespace=namespace,
            value_files=[values_file],
        )
        if not result.success:
            raise DeploymentError.from_result(
                f"Failed to render the {engine.value} chart", result
            )

        # Forced replacement recreates the database objects, with downtime
        result = self.commands.kubectl.replace(
            output_dir / spec.chart_dir_name,
            namespace=namespace,
            recursive=True,
            force=True,
            on_output=self.console.stream,
        )
        if not result.success:
            raise DeploymentError.from_result(
                f"Failed to apply {engine.value} manifests", result
            )

        with self.console.status("[cyan]Waiting for database pod to be ready...[/cyan]"):
            wait = wait_for_condition(
                self.commands.kubectl,
                "ready",
                namespace,
                resource="pod",
                selector=self.pod_selector(engine, name),
                timeout=self.settings.wait_timeout,
                interval=self.settings.wait_interval,
            )
        require_ready(wait, f"{engine.value} database pod")

        self.console.print(f"[green]✓ Database ready at {connection.host}[/green]")
        return connection

    def chart_values(
        self, engine: DatabaseEngine, connection: DatabaseConnection
    ) -> dict[str, Any]:
        """Values overriding the engine chart's defaults."""
        database = self.settings.database
        if engine is DatabaseEngine.MYSQL:
            values: dict[str, Any] = {
                "mysqlUser": connection.user,
                "mysqlPassword": connection.password,
                "mysqlRootPassword": connection.password,
                "mysqlDatabase": connection.name,
            }
            if database.mysql_version_tag:
                values["imageTag"] = database.mysql_version_tag
            return values

        values = {
            "postgresqlUsername": connection.user,
            "postgresqlPassword": connection.password,
            "postgresqlDatabase": connection.name,
            "nameOverride": "postgres",
        }
        if database.postgres_version_tag:
            values["image"] = {"tag": database.postgres_version_tag}
        return values

    @staticmethod
    def pod_selector(engine: DatabaseEngine, name: str) -> str:
        """Label selector matching the database pod of a release."""
        if engine is DatabaseEngine.MYSQL:
            return f"app={name}-mysql,release={name}"
        return f"app=postgres,release={name}"

    def _pull_chart(self, spec: EngineSpec) -> Path:
        charts_dir = self.paths.database_charts
        chart_path = charts_dir / spec.chart_dir_name
        if chart_path.exists():
            shutil.rmtree(chart_path)
        charts_dir.mkdir(parents=True, exist_ok=True)

        result = self.commands.helm.pull_chart(
            spec.chart, charts_dir, version=spec.chart_version
        )
        if not result.success:
            raise DeploymentError.from_result(
                f"Failed to fetch chart {spec.chart}",
                result,
                hint="Run 'autodevops setup-helm' to register the chart repository.",
            )
        return chart_path
