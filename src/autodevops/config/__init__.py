"""Configuration models and loaders."""

from .loader import build_settings, load_settings, secret_variables
from .settings import (
    ApplicationSettings,
    AutoDevOpsSettings,
    ClusterCredentials,
    DatabaseSettings,
    KubernetesSettings,
    RegistrySettings,
)

__all__ = [
    "AutoDevOpsSettings",
    "ApplicationSettings",
    "ClusterCredentials",
    "DatabaseSettings",
    "KubernetesSettings",
    "RegistrySettings",
    "build_settings",
    "load_settings",
    "secret_variables",
]
