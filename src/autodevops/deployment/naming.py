"""Release and secret naming rules."""

from __future__ import annotations

from .constants import DeploymentConstants

_CONSTANTS = DeploymentConstants()


def deploy_name(environment_slug: str, track: str = _CONSTANTS.DEFAULT_TRACK) -> str:
    """Compute the release name for a track.

    The default track deploys under the bare environment slug; any other
    track is appended with a hyphen.

    Args:
        environment_slug: CI environment slug (e.g., "review-feature-x")
        track: Release track (e.g., "stable", "canary")

    Returns:
        Release name used for labels, jobs and the deployment
    """
    if track == _CONSTANTS.DEFAULT_TRACK:
        return environment_slug
    return f"{environment_slug}-{track}"


def application_secret_name(
    environment_slug: str, track: str = _CONSTANTS.DEFAULT_TRACK
) -> str:
    """Name of the Secret holding a track's application variables."""
    return f"{deploy_name(environment_slug, track)}-secret"
