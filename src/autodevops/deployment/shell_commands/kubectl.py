"""Kubectl command abstractions.

This module provides commands for Kubernetes resource management via
kubectl subprocess calls: kubeconfig registration, namespace bootstrap,
applying and replacing manifests, label-based deletion and condition
waits.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from .types import CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class KubectlCommands:
    """Kubectl-related shell commands.

    Provides operations for:
    - Kubeconfig cluster/credential/context registration
    - Namespace management
    - Manifest apply and forced replace
    - Resource deletion (by name or label)
    - Waiting for resource conditions
    """

    def __init__(self, runner: CommandRunner) -> None:
        """Initialize kubectl commands.

        Args:
            runner: Command runner for executing shell commands
        """
        self._runner = runner

    def _run(
        self,
        args: list[str],
        *,
        input_data: str | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        cmd = ["kubectl", *args]
        if on_output:
            return self._runner.run_streaming(
                cmd, on_output=on_output, input_data=input_data
            )
        return self._runner.run(cmd, input_data=input_data)

    # =========================================================================
    # Kubeconfig
    # =========================================================================

    def set_cluster(
        self, name: str, server: str, certificate_authority: Path
    ) -> CommandResult:
        """Register a cluster entry in the kubeconfig."""
        return self._run(
            [
                "config",
                "set-cluster",
                name,
                "--server",
                server,
                f"--certificate-authority={certificate_authority}",
            ]
        )

    def set_credentials(self, name: str, token: str) -> CommandResult:
        """Register a bearer-token user entry in the kubeconfig."""
        return self._run(["config", "set-credentials", name, f"--token={token}"])

    def set_context(
        self, name: str, *, user: str, cluster: str, namespace: str
    ) -> CommandResult:
        """Register a context binding user, cluster and default namespace."""
        return self._run(
            [
                "config",
                "set-context",
                name,
                f"--user={user}",
                f"--cluster={cluster}",
                f"--namespace={namespace}",
            ]
        )

    def use_context(self, name: str) -> CommandResult:
        """Switch the active kubeconfig context."""
        return self._run(["config", "use-context", name])

    # =========================================================================
    # Namespace Management
    # =========================================================================

    def namespace_exists(self, namespace: str) -> bool:
        """Check if a namespace exists."""
        return self._run(["get", "namespace", namespace]).success

    def create_namespace(self, namespace: str) -> CommandResult:
        """Create a namespace."""
        return self._run(["create", "namespace", namespace])

    def label_namespace(
        self, namespace: str, label: str, *, overwrite: bool = True
    ) -> CommandResult:
        """Apply a ``key=value`` label to a namespace."""
        args = ["label", "namespace", namespace, label]
        if overwrite:
            args.append("--overwrite")
        return self._run(args)

    # =========================================================================
    # Manifests
    # =========================================================================

    def apply(
        self,
        path: Path,
        namespace: str,
        *,
        recursive: bool = False,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Apply a manifest file or directory.

        Args:
            path: Manifest file or directory
            namespace: Kubernetes namespace
            recursive: Descend into subdirectories when path is a directory
            on_output: Optional callback for real-time output streaming

        Returns:
            CommandResult with apply status
        """
        args = ["apply", "-n", namespace]
        if recursive:
            args.append("--recursive")
        args.extend(["-f", str(path)])
        return self._run(args, on_output=on_output)

    def replace(
        self,
        path: Path,
        *,
        namespace: str | None = None,
        recursive: bool = False,
        force: bool = True,
        on_output: Callable[[str], None] | None = None,
    ) -> CommandResult:
        """Replace resources from a manifest file or directory.

        With ``force`` the existing objects are deleted and recreated,
        which causes downtime for the affected workloads.

        Args:
            path: Manifest file or directory
            namespace: Optional namespace override
            recursive: Descend into subdirectories when path is a directory
            force: Delete and recreate instead of updating in place
            on_output: Optional callback for real-time output streaming

        Returns:
            CommandResult with replace status
        """
        args = ["replace"]
        if namespace:
            args.extend(["-n", namespace])
        if recursive:
            args.append("--recursive")
        args.extend(["-f", str(path)])
        if force:
            args.append("--force")
        return self._run(args, on_output=on_output)

    def replace_from_stdin(
        self, manifest: str, namespace: str, *, force: bool = True
    ) -> CommandResult:
        """Replace resources described by a manifest passed on stdin."""
        args = ["replace", "-n", namespace, "-f", "-"]
        if force:
            args.append("--force")
        return self._run(args, input_data=manifest)

    # =========================================================================
    # Resource Deletion
    # =========================================================================

    def delete_resource(
        self,
        resource: str,
        namespace: str,
        *,
        ignore_not_found: bool = True,
    ) -> CommandResult:
        """Delete a single resource.

        Args:
            resource: Resource reference (e.g., "jobs/app-initialize"
                      or "secret app-secret")
            namespace: Kubernetes namespace
            ignore_not_found: Treat an absent resource as success

        Returns:
            CommandResult with deletion status
        """
        args = ["delete", *resource.split(), "-n", namespace]
        if ignore_not_found:
            args.append("--ignore-not-found")
        return self._run(args)

    def delete_resources_by_label(
        self,
        resource_types: str,
        namespace: str,
        label_selector: str,
        *,
        ignore_not_found: bool = True,
    ) -> CommandResult:
        """Delete Kubernetes resources matching a label selector.

        Args:
            resource_types: Comma-separated resource types
                           (e.g., "pods,services,jobs")
            namespace: Kubernetes namespace
            label_selector: Label selector (e.g., "release=my-app")
            ignore_not_found: Treat absent resources as success

        Returns:
            CommandResult with deletion status
        """
        args = ["delete", resource_types, "-n", namespace, "-l", label_selector]
        if ignore_not_found:
            args.append("--ignore-not-found")
        return self._run(args)

    # =========================================================================
    # Waits
    # =========================================================================

    def wait_for(
        self,
        condition: str,
        namespace: str,
        *,
        resource: str,
        selector: str | None = None,
        timeout_seconds: int = 600,
    ) -> CommandResult:
        """Block until a resource reaches a condition.

        Args:
            condition: Condition name (e.g., "ready", "complete", "available")
            namespace: Kubernetes namespace
            resource: Resource type or reference (e.g., "pod",
                      "jobs/app-migrate", "deployments/app")
            selector: Optional label selector narrowing ``resource``
            timeout_seconds: Maximum time kubectl waits before giving up

        Returns:
            CommandResult with wait status
        """
        args = [
            "wait",
            resource,
            f"--for=condition={condition}",
            f"--timeout={timeout_seconds}s",
            "-n",
            namespace,
        ]
        if selector:
            args.extend(["-l", selector])
        return self._run(args)
