"""Settings loading from environment-style sources.

Sources, lowest to highest precedence:

1. An optional YAML config file whose root is a mapping of
   environment-style keys (``KUBE_NAMESPACE: review``)
2. An optional dotenv file (read without touching ``os.environ``)
3. The process environment
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from loguru import logger
from pydantic import ValidationError

from autodevops.deployment.constants import DeploymentConstants
from autodevops.deployment.errors import DeploymentError

from .settings import AutoDevOpsSettings

SECRET_PREFIX = DeploymentConstants.SECRET_ENV_PREFIX

# Environment key -> (section, field)
ENV_FIELDS: dict[str, tuple[str, str]] = {
    "CI_REGISTRY": ("registry", "registry"),
    "CI_REGISTRY_IMAGE": ("registry", "registry_image"),
    "DOCKER_IMAGE_NAME": ("registry", "image_name"),
    "CI_REGISTRY_USER": ("registry", "user"),
    "CI_REGISTRY_PASSWORD": ("registry", "password"),
    "CI_COMMIT_SHA": ("registry", "commit_sha"),
    "CI_COMMIT_REF_NAME": ("registry", "commit_ref_name"),
    "DOCKER_BUILD_SOURCE": ("registry", "dockerfile"),
    "KUBE_NAMESPACE": ("kubernetes", "namespace"),
    "POSTGRES_ENABLED": ("database", "postgres_enabled"),
    "MYSQL_ENABLED": ("database", "mysql_enabled"),
    "DATABASE_USER": ("database", "user"),
    "DATABASE_PASSWORD": ("database", "password"),
    "DATABASE_DB": ("database", "name"),
    "DATABASE_URL": ("database", "url"),
    "POSTGRES_VERSION_TAG": ("database", "postgres_version_tag"),
    "MYSQL_VERSION_TAG": ("database", "mysql_version_tag"),
    "CI_PROJECT_PATH_SLUG": ("application", "project_path_slug"),
    "CI_ENVIRONMENT_SLUG": ("application", "environment_slug"),
    "CI_ENVIRONMENT_URL": ("application", "environment_url"),
    "SERVICE_PORT": ("application", "service_port"),
    "DB_INITIALIZE": ("application", "initialize_command"),
    "DB_MIGRATE": ("application", "migrate_command"),
}

TOP_LEVEL_FIELDS: dict[str, str] = {
    "DEVOPS_SCRATCH_DIR": "scratch_dir",
    "WAIT_TIMEOUT_SECONDS": "wait_timeout",
    "WAIT_INTERVAL_SECONDS": "wait_interval",
}

# Credentials of the default cluster carry no selector infix
PRODUCTION_CLUSTER = DeploymentConstants.DEFAULT_CLUSTER
PRODUCTION_CLUSTER_KEYS: dict[str, str] = {
    "K8S_CLUSTER_NAME": "name",
    "K8S_TOKEN": "token",
    "K8S_API_URL": "api_url",
    "K8S_CERTIFICATE": "certificate",
}
CLUSTER_FIELD_SUFFIXES: dict[str, str] = {
    "CLUSTER_NAME": "name",
    "TOKEN": "token",
    "API_URL": "api_url",
    "CERTIFICATE": "certificate",
}
CLUSTER_KEY_RE = re.compile(r"^K8S_([A-Z0-9]+)_(CLUSTER_NAME|TOKEN|API_URL|CERTIFICATE)$")
TRACK_DATABASE_URL_RE = re.compile(r"^K8S_([A-Z0-9_]+)_DATABASE_URL$")


def read_config_file(config_file: Path) -> dict[str, str]:
    """Read a YAML file mapping environment-style keys to values.

    Args:
        config_file: Path to the YAML file

    Returns:
        Mapping of key to string value (empty for an empty file)

    Raises:
        DeploymentError: If the file is missing, unparsable or not a mapping
    """
    if not config_file.exists():
        raise DeploymentError(f"Config file not found: {config_file}")

    try:
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except (yaml.YAMLError, OSError) as exc:
        raise DeploymentError(f"Invalid config file '{config_file}'", details=str(exc)) from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise DeploymentError("Config file must contain a YAML mapping at the root.")

    return {str(key): "" if value is None else str(value) for key, value in parsed.items()}


def read_env_file(env_file: Path) -> dict[str, str]:
    """Read a dotenv file without exporting it; missing files yield {}."""
    if not env_file.exists():
        return {}
    return {key: value for key, value in dotenv_values(env_file).items() if value is not None}


def collect_values(
    *,
    config_file: Path | None = None,
    env_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge every source into one flat environment-style mapping.

    An empty value never hides a non-empty one from a lower-precedence
    source; CI systems routinely define variables with no value.
    """
    sources: list[Mapping[str, str]] = []
    if config_file is not None:
        sources.append(read_config_file(config_file))
    if env_file is not None:
        sources.append(read_env_file(env_file))
    sources.append(os.environ if environ is None else environ)

    values: dict[str, str] = {}
    for source in sources:
        for key, value in source.items():
            if value != "" or key not in values:
                values[key] = value
    return values


def secret_variables(values: Mapping[str, str], prefix: str = SECRET_PREFIX) -> dict[str, str]:
    """Select prefixed variables and strip the prefix from their names.

    Values are returned exactly as given; nothing is unquoted or escaped.
    """
    return {
        key[len(prefix) :]: value
        for key, value in sorted(values.items())
        if key.startswith(prefix) and len(key) > len(prefix)
    }


def _cluster_credentials(values: Mapping[str, str]) -> dict[str, dict[str, str]]:
    clusters: dict[str, dict[str, str]] = {}
    for key, field in PRODUCTION_CLUSTER_KEYS.items():
        if values.get(key):
            clusters.setdefault(PRODUCTION_CLUSTER, {})[field] = values[key]

    for key, value in values.items():
        match = CLUSTER_KEY_RE.match(key)
        if not match or not value:
            continue
        selector, suffix = match.groups()
        # K8S_SECRET_* belongs to the application secret, never to a cluster
        if selector == "SECRET":
            continue
        clusters.setdefault(selector.lower(), {})[CLUSTER_FIELD_SUFFIXES[suffix]] = value
    return clusters


def _track_database_urls(values: Mapping[str, str]) -> dict[str, str]:
    urls: dict[str, str] = {}
    for key, value in values.items():
        match = TRACK_DATABASE_URL_RE.match(key)
        if match and value and not key.startswith(SECRET_PREFIX):
            urls[match.group(1)] = value
    return urls


def build_settings(values: Mapping[str, str]) -> AutoDevOpsSettings:
    """Validate a flat environment-style mapping into settings.

    Empty values are treated as unset so model defaults apply.

    Raises:
        DeploymentError: If any value fails validation
    """
    data: dict[str, Any] = {
        "registry": {},
        "kubernetes": {},
        "database": {},
        "application": {},
    }
    for key, (section, field) in ENV_FIELDS.items():
        value = values.get(key, "")
        if value != "":
            data[section][field] = value
    for key, field in TOP_LEVEL_FIELDS.items():
        value = values.get(key, "")
        if value != "":
            data[field] = value

    data["kubernetes"]["clusters"] = _cluster_credentials(values)
    data["database"]["track_urls"] = _track_database_urls(values)
    data["secret_variables"] = secret_variables(values)
    data["trace"] = bool(values.get("TRACE"))

    try:
        settings = AutoDevOpsSettings.model_validate(data)
    except ValidationError as exc:
        raise DeploymentError("Invalid configuration", details=str(exc)) from exc

    logger.debug(
        "Loaded settings: namespace={}, clusters={}, secret keys={}",
        settings.kubernetes.namespace,
        sorted(settings.kubernetes.clusters),
        sorted(settings.secret_variables),
    )
    return settings


def load_settings(
    *,
    config_file: Path | None = None,
    env_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AutoDevOpsSettings:
    """Collect every source and validate it into settings.

    Args:
        config_file: Optional YAML config file
        env_file: Optional dotenv file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated, frozen settings
    """
    values = collect_values(config_file=config_file, env_file=env_file, environ=environ)
    logger.info("Loading configuration from {} keys", len(values))
    return build_settings(values)
